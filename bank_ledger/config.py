"""
Configuration Management Module

Provides centralized configuration using pydantic-settings for environment-based configuration.
"""

from pydantic_settings import BaseSettings


class LedgerConfig(BaseSettings):
    """Bank ledger configuration"""
    
    # Ledger defaults
    default_liquidity: int = 1000  # Cents, used when a Ledger is built without one
    fee_percent: int = 5  # Deposit and opening fee, truncated toward zero
    
    # Logging configuration
    log_level: str = "INFO"
    log_format: str = "json"  # json or text
    
    # Feature flags
    enable_events: bool = True
    
    class Config:
        env_prefix = "BANK_LEDGER_"
        env_file = ".env"
        case_sensitive = False


# Global configuration instance
config = LedgerConfig()


def get_config() -> LedgerConfig:
    """Get global configuration instance"""
    return config


def reload_config() -> LedgerConfig:
    """Reload configuration from environment"""
    global config
    config = LedgerConfig()
    return config
