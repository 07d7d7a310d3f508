"""
Configuration management for the content pipeline.

This module provides configuration loading and management
for the application.
"""

import os
from typing import Optional, List
from dataclasses import dataclass, field
from dotenv import load_dotenv

# Load environment variables
load_dotenv()


@dataclass
class Config:
    """Base configuration class."""

    # Flask settings
    SECRET_KEY: str = os.environ.get('SECRET_KEY', 'dev-secret-key-change-in-production')
    DEBUG: bool = os.environ.get('DEBUG', 'false').lower() == 'true'
    TESTING: bool = os.environ.get('TESTING', 'false').lower() == 'true'

    # API settings
    API_TITLE: str = 'Content Pipeline'
    API_VERSION: str = '1.0.0'

    # Authentication and tenancy
    API_KEY_HEADER: str = 'X-API-Key'
    TENANT_HEADER: str = 'X-Tenant-ID'
    API_KEYS: frozenset = field(default_factory=lambda: frozenset([
        key.strip() for key in (os.environ.get('API_KEYS', '').split(',') if os.environ.get('API_KEYS') else [])
    ]))

    # Rate limiting
    RATELIMIT_ENABLED: bool = os.environ.get('RATELIMIT_ENABLED', 'true').lower() == 'true'
    RATELIMIT_STORAGE_URI: str = os.environ.get('RATELIMIT_STORAGE_URI', 'memory://')
    RATELIMIT_DEFAULT: str = os.environ.get('RATELIMIT_DEFAULT', '1000 per hour')
    RATELIMIT_CREATE: str = os.environ.get('RATELIMIT_CREATE', '30 per hour')

    # Logging
    LOG_LEVEL: str = os.environ.get('LOG_LEVEL', 'INFO')
    LOG_FILE: str = os.environ.get('LOG_FILE', 'logs/app.log')
    LOG_MAX_BYTES: int = int(os.environ.get('LOG_MAX_BYTES', 10485760))  # 10MB
    LOG_BACKUP_COUNT: int = int(os.environ.get('LOG_BACKUP_COUNT', 5))
    LOG_REQUESTS: bool = os.environ.get('LOG_REQUESTS', 'true').lower() == 'true'

    # Generator service
    LLM_MODEL: str = os.environ.get('LLM_MODEL', 'openai/gpt-4o')
    LLM_API_KEY: Optional[str] = os.environ.get('LLM_API_KEY')
    LLM_API_BASE: Optional[str] = os.environ.get('LLM_API_BASE')
    LLM_TIMEOUT: int = int(os.environ.get('LLM_TIMEOUT', '60'))
    LLM_TEMPERATURE: float = float(os.environ.get('LLM_TEMPERATURE', '0.3'))
    LLM_MAX_TOKENS: int = int(os.environ.get('LLM_MAX_TOKENS', '4000'))
    LLM_REQUESTS_PER_MINUTE: int = int(os.environ.get('LLM_REQUESTS_PER_MINUTE', '60'))

    # Retry policy
    RETRY_MAX_ATTEMPTS: int = int(os.environ.get('RETRY_MAX_ATTEMPTS', '3'))
    RATE_LIMIT_BACKOFF_SECONDS: float = float(os.environ.get('RATE_LIMIT_BACKOFF_SECONDS', '60'))

    # Pipeline gates
    PIPELINE_TIMEOUT_SECONDS: float = float(os.environ.get('PIPELINE_TIMEOUT_SECONDS', '180'))
    MIN_APPROVED_FACTS: int = int(os.environ.get('MIN_APPROVED_FACTS', '5'))
    MIN_APPROVAL_RATE: float = float(os.environ.get('MIN_APPROVAL_RATE', '0.6'))
    RESEARCH_CONFIDENCE_FLOOR: float = float(os.environ.get('RESEARCH_CONFIDENCE_FLOOR', '0.7'))
    MIN_WORD_COUNT: int = int(os.environ.get('MIN_WORD_COUNT', '650'))
    MAX_TITLE_LENGTH: int = int(os.environ.get('MAX_TITLE_LENGTH', '60'))
    MAX_META_DESCRIPTION_LENGTH: int = int(os.environ.get('MAX_META_DESCRIPTION_LENGTH', '155'))

    # Storage
    STORAGE_BACKEND: str = os.environ.get('STORAGE_BACKEND', 'supabase')
    SUPABASE_URL: Optional[str] = os.environ.get('SUPABASE_URL')
    SUPABASE_KEY: Optional[str] = os.environ.get('SUPABASE_KEY') or os.environ.get('SUPABASE_ANON_KEY')

    # Celery configuration
    CELERY_BROKER_URL: str = os.environ.get('CELERY_BROKER_URL', 'redis://localhost:6379/0')
    CELERY_RESULT_BACKEND: str = os.environ.get('CELERY_RESULT_BACKEND', 'redis://localhost:6379/0')
    CELERY_TASK_TIME_LIMIT: int = int(os.environ.get('CELERY_TASK_TIME_LIMIT', '300'))
    CELERY_TASK_SOFT_TIME_LIMIT: int = int(os.environ.get('CELERY_TASK_SOFT_TIME_LIMIT', '240'))
    CELERY_WORKER_PREFETCH_MULTIPLIER: int = int(os.environ.get('CELERY_WORKER_PREFETCH_MULTIPLIER', '1'))
    CELERY_WORKER_MAX_TASKS_PER_CHILD: int = int(os.environ.get('CELERY_WORKER_MAX_TASKS_PER_CHILD', '1000'))
    CELERY_TASK_ALWAYS_EAGER: bool = os.environ.get('CELERY_TASK_ALWAYS_EAGER', 'false').lower() == 'true'

    # Request settings
    MAX_CONTENT_LENGTH: int = int(os.environ.get('MAX_CONTENT_LENGTH', 1048576))  # 1MB

    # CORS settings
    CORS_ORIGINS: List[str] = field(default_factory=lambda: os.environ.get('CORS_ORIGINS', '*').split(','))


@dataclass
class DevelopmentConfig(Config):
    """Development configuration."""
    DEBUG: bool = True
    LOG_LEVEL: str = 'DEBUG'
    RATELIMIT_DEFAULT: str = '5000 per hour'  # Very lenient for development


@dataclass
class ProductionConfig(Config):
    """Production configuration."""
    DEBUG: bool = False
    LOG_LEVEL: str = 'WARNING'


@dataclass
class TestingConfig(Config):
    """Testing configuration."""
    TESTING: bool = True
    DEBUG: bool = True
    LOG_LEVEL: str = 'CRITICAL'
    LOG_FILE: str = ''
    API_KEYS: frozenset = field(default_factory=lambda: frozenset(['test-api-key']))
    RATELIMIT_ENABLED: bool = False
    STORAGE_BACKEND: str = 'memory'
    RATE_LIMIT_BACKOFF_SECONDS: float = 0.0
    CELERY_BROKER_URL: str = 'memory://'
    CELERY_RESULT_BACKEND: str = 'cache+memory://'
    CELERY_TASK_ALWAYS_EAGER: bool = True


def get_config(config_name: str = None) -> Config:
    """
    Get configuration based on environment.

    Args:
        config_name: Configuration name (development, production, testing)

    Returns:
        Configuration object
    """
    if config_name is None:
        config_name = os.environ.get('FLASK_ENV', 'development').lower()

    config_map = {
        'development': DevelopmentConfig,
        'production': ProductionConfig,
        'testing': TestingConfig
    }

    config_class = config_map.get(config_name, DevelopmentConfig)
    return config_class()


def validate_config(config: Config) -> List[str]:
    """
    Validate configuration.

    Args:
        config: Configuration to validate

    Returns:
        List of validation errors
    """
    errors = []

    # Check required settings
    if not config.API_KEYS:
        errors.append("API_KEYS must be configured")

    if config.SECRET_KEY == 'dev-secret-key-change-in-production' and config.DEBUG is False:
        errors.append("SECRET_KEY must be changed in production")

    # Check storage
    if config.STORAGE_BACKEND not in ('supabase', 'memory'):
        errors.append(f"STORAGE_BACKEND must be 'supabase' or 'memory', got '{config.STORAGE_BACKEND}'")

    if config.STORAGE_BACKEND == 'supabase' and not (config.SUPABASE_URL and config.SUPABASE_KEY):
        errors.append("SUPABASE_URL and SUPABASE_KEY are required for the supabase backend")

    # Check pipeline settings
    if config.RETRY_MAX_ATTEMPTS < 1:
        errors.append("RETRY_MAX_ATTEMPTS must be at least 1")

    if not 0.0 <= config.MIN_APPROVAL_RATE <= 1.0:
        errors.append("MIN_APPROVAL_RATE must be between 0 and 1")

    if config.PIPELINE_TIMEOUT_SECONDS <= 0:
        errors.append("PIPELINE_TIMEOUT_SECONDS must be positive")

    # Check Celery configuration
    if not config.CELERY_BROKER_URL:
        errors.append("CELERY_BROKER_URL must be configured")

    if not config.CELERY_RESULT_BACKEND:
        errors.append("CELERY_RESULT_BACKEND must be configured")

    return errors
