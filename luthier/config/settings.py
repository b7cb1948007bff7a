import os

from dotenv import load_dotenv


load_dotenv()


class Settings:
    """Application configuration settings."""

    # Credentials are read by the collaborators at construction time, not here
    GEMINI_API_KEY_ENV: str = "GEMINI_API_KEY"
    OPENAI_API_KEY_ENV: str = "OPENAI_API_KEY"

    # Model Configuration
    ANALYSIS_MODEL: str = os.getenv("ANALYSIS_MODEL", "gemini-3-flash-preview")
    PROMPT_MODEL: str = os.getenv("PROMPT_MODEL", "gemini-3-pro-preview")
    IMAGE_MODEL: str = os.getenv("IMAGE_MODEL", "gemini-3-pro-image-preview")
    ADVISORY_MODEL: str = os.getenv("ADVISORY_MODEL", "gemini-3-flash-preview")
    OPENAI_VISION_MODEL: str = os.getenv("OPENAI_VISION_MODEL", "gpt-4o")

    # "gemini" or "openai"
    ANALYSIS_PROVIDER: str = os.getenv("ANALYSIS_PROVIDER", "gemini").lower()

    # Sampling
    PROMPT_TEMPERATURE: float = float(os.getenv("PROMPT_TEMPERATURE", "0.7"))
    ADVISORY_TEMPERATURE: float = float(os.getenv("ADVISORY_TEMPERATURE", "0.5"))

    # Render output, fixed and never exposed to the user
    IMAGE_SIZE: str = "1K"
    IMAGE_ASPECT_RATIO: str = "1:1"

    DEFAULT_PHILOSOPHY: str = "Standard Industry Design"
    DEFAULT_IMAGE_MIME: str = "image/jpeg"

    # Offline collaborator for front-end work
    USE_MOCK_CLIENT: bool = os.getenv("LUTHIER_MOCK", "0").lower() in ("1", "true", "yes")


settings = Settings()
