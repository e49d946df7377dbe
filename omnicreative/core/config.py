"""
Configuration management for OmniCreative
"""

import os

from dotenv import load_dotenv

# Load environment variables
load_dotenv()


class Config:
    """Application configuration"""

    # Gemini
    GEMINI_API_KEY: str = os.getenv('GEMINI_API_KEY', '')

    # Model Defaults
    STRATEGY_MODEL: str = 'gemini-3-pro-preview'
    RESEARCH_MODEL: str = 'gemini-3-pro-preview'  # Pro gives better search synthesis
    IMAGE_MODEL: str = 'gemini-3-pro-image-preview'

    # Copywriting
    STRATEGY_THINKING_BUDGET: int = int(os.getenv('STRATEGY_THINKING_BUDGET', '2048'))

    # Image generation
    IMAGE_ASPECT_RATIO: str = os.getenv('IMAGE_ASPECT_RATIO', '16:9')
    IMAGE_SIZE: str = os.getenv('IMAGE_SIZE', '2K')

    # Veo video generation
    VEO_MODEL_VARIANT: str = os.getenv('VEO_MODEL_VARIANT', 'fast')
    VEO_POLL_INTERVAL_SECONDS: float = float(os.getenv('VEO_POLL_INTERVAL_SECONDS', '5'))
    VEO_TIMEOUT_SECONDS: float = float(os.getenv('VEO_TIMEOUT_SECONDS', '600'))
    VIDEO_OUTPUT_DIR: str = os.getenv('VIDEO_OUTPUT_DIR', 'generated_videos')

    # Rate limiting
    MAX_RETRIES: int = int(os.getenv('GEMINI_MAX_RETRIES', '3'))

    # Logging
    LOG_LEVEL: str = os.getenv('LOG_LEVEL', 'INFO')

    @classmethod
    def validate(cls) -> bool:
        """Validate required configuration"""
        required = {
            'GEMINI_API_KEY': cls.GEMINI_API_KEY,
        }

        missing = [k for k, v in required.items() if not v]

        if missing:
            raise ValueError(f"Missing required configuration: {', '.join(missing)}")

        return True

    @classmethod
    def get_model(cls, key: str) -> str:
        """
        Get the configured model for a capability.

        Resolution Order:
        1. Environment Variable: {KEY}_MODEL (e.g. IMAGE_MODEL)
        2. Class default for the capability
        3. Config.STRATEGY_MODEL

        Args:
            key: capability name ('strategy', 'research', 'image'),
                 case-insensitive.

        Returns:
            Model identifier (e.g. 'gemini-3-pro-preview')
        """
        key_upper = key.upper()

        env_model = os.getenv(f"{key_upper}_MODEL")
        if env_model:
            return env_model

        mappings = {
            "STRATEGY": cls.STRATEGY_MODEL,
            "RESEARCH": cls.RESEARCH_MODEL,
            "IMAGE": cls.IMAGE_MODEL,
        }

        return mappings.get(key_upper, cls.STRATEGY_MODEL)
