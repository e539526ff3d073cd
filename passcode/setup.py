def run():
    """
    Run before every entry point:
        fastapi server
        sweep scheduler
        test session
    """
    from loguru import logger

    configure_logging()
    configure_sentry()
    configure_models()

    logger.info('application setup complete ✅')


def configure_logging():
    from passcode.common.logs import configure_logging as configure_loguru

    configure_loguru()


def configure_sentry():
    import sentry_sdk
    from sentry_sdk.integrations.fastapi import FastApiIntegration
    from sentry_sdk.integrations.starlette import StarletteIntegration

    from passcode import settings
    from passcode.common.exceptions import APIException

    if settings.USE_MOCK_SENTRY_CLIENT:
        return

    def traces_sampler(sampling_context):
        """
        Custom filter for sentry traces
        """
        IGNORE_PATHS = {
            # Healthchecks would use up most of the transaction bandwidth
            '/healthcheck/api',
        }
        if 'asgi_scope' in sampling_context:
            if sampling_context['asgi_scope']['path'] in IGNORE_PATHS:
                return 0

        return settings.SENTRY_DEFAULT_SAMPLE_RATE

    sentry_sdk.init(
        dsn=settings.SENTRY_DSN,
        ignore_errors=[APIException],
        environment=settings.ENVIRONMENT,
        integrations=[
            # Both integrations must be instantiated
            StarletteIntegration(),
            FastApiIntegration(),
        ],
        traces_sampler=traces_sampler,
    )


def configure_models():
    """
    When using declarative we need to run this for our entry points
    so every model is registered on the metadata
    """
    from passcode.common.model import import_model_modules

    import_model_modules()
