from loguru import logger

from passcode.platform.email import client
from passcode.platform.email.utils import render_template


class EmailService:
    """
    Builds messages from templates and hands them to an explicit client
    """

    def __init__(
        self,
        email_client: client.AbstractEmailClient,
        from_address: str,
        company_name: str,
        environment: str = 'production',
    ):
        self.client = email_client
        self.from_address = from_address
        self.company_name = company_name
        self.environment = environment

    def _enhance_subject(self, subject: str) -> str:
        """
        Append environment to non production mail
        """
        if self.environment != 'production':
            subject += f' - [{self.environment}]'

        return subject

    def send(
        self,
        subject: str,
        recipients: list[str],
        plain_message: str | None = None,
        html_message: str | None = None,
    ):
        message = client.EmailClientDomain(
            from_email=(self.from_address, self.company_name),
            to_emails=recipients,
            subject=self._enhance_subject(subject),
            plain_text_content=plain_message,
            html_content=html_message,
        )
        logger.info(f'sending {subject} email')
        self.client.send(message)

    def send_template(
        self,
        subject: str,
        recipients: list[str],
        template_name: str,
        plain_message: str,
        context: dict | None = None,
    ):
        html_message = render_template(
            template_name=template_name,
            # subject is used for the email's title
            context=dict(subject=subject, **(context or {})),
            company_name=self.company_name,
        )
        self.send(
            subject=subject,
            recipients=recipients,
            plain_message=plain_message,
            html_message=html_message,
        )
