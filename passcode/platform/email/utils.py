import datetime

from jinja2 import Environment, PackageLoader, select_autoescape

_environment = Environment(
    loader=PackageLoader('passcode.platform.email', 'templates'),
    autoescape=select_autoescape(['html', 'xml']),
)


def render_template(template_name: str, context: dict, company_name: str):
    template = _environment.get_template(template_name)

    # Add company information to all email templates
    return template.render(
        **context,
        copyright_year=datetime.date.today().year,
        company_name=company_name,
    )
