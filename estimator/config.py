import os

class BaseConfig:
    SECRET_KEY = os.getenv('SECRET_KEY', 'change-me')
    SQLALCHEMY_DATABASE_URI = os.getenv('DATABASE_URL', 'sqlite:///app.db')
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SESSION_COOKIE_SAMESITE = 'Lax'
    SESSION_COOKIE_SECURE = False
    # Used when an estimate's adjustments carry no tax rate of their own
    DEFAULT_TAX_RATE = float(os.getenv('DEFAULT_TAX_RATE', '8.25'))

class DevConfig(BaseConfig):
    DEBUG = True
    ENV = 'development'

class ProdConfig(BaseConfig):
    DEBUG = False
    ENV = 'production'
    SESSION_COOKIE_SECURE = True

class TestConfig(BaseConfig):
    TESTING = True
    ENV = 'testing'
    SQLALCHEMY_DATABASE_URI = 'sqlite:///:memory:'
