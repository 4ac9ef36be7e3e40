import os


def _str_to_bool(v, default=False):
    if v is None:
        return default
    return v.strip().lower() in {"1", "true", "yes", "y", "on"}


class Config:
    JSON_SORT_KEYS = False
    ENV = os.getenv("FLASK_ENV", "production")
    TESTING = False

    PRICING_LOG_LEVEL = os.getenv("PRICING_LOG_LEVEL", "INFO").upper()
    PRICING_CORS_ORIGINS = os.getenv("PRICING_CORS_ORIGINS", "*")
    # let callers pin "now" (invoice re-rendering, tests); off in production
    PRICING_ALLOW_CLIENT_NOW = _str_to_bool(os.getenv("PRICING_ALLOW_CLIENT_NOW"), default=False)

    @staticmethod
    def init_app(app):
        # app.logger is the "pricing_api" logger; service loggers inherit its level
        level = app.config["PRICING_LOG_LEVEL"]
        app.logger.setLevel(level)


class TestingConfig(Config):
    TESTING = True
    PRICING_LOG_LEVEL = "DEBUG"
    PRICING_ALLOW_CLIENT_NOW = True
