from pydantic import BaseModel, ConfigDict, Field


class TokenRules(BaseModel):
    unsubscribe_ttl_minutes: int = Field(default=60 * 24 * 30, gt=0)
    confirmation_ttl_minutes: int = Field(default=60 * 24, gt=0)
    session_ttl_minutes: int = Field(default=60 * 24, gt=0)
    algorithm: str = "HS256"


class RateLimitRules(BaseModel):
    subscribe_window_seconds: int = Field(default=60, gt=0)
    subscribe_max_requests: int = Field(default=5, ge=0)


class PathRules(BaseModel):
    unsubscribe_page: str = "/unsubscribe"
    subscribe_confirm_endpoint: str = "/api/email/subscribe"
    subscribe_success_page: str = "/subscribe/success"
    subscribe_error_page: str = "/subscribe/error"


class EmailRules(BaseModel):
    site_name: str = "Lumos"
    sender: str = "noreply@lumos.com"
    sender_name: str = "Lumos"


class SlugRules(BaseModel):
    pattern: str = r"^[a-z0-9-]+$"
    publication_min: int = 2
    publication_max: int = 50
    post_min: int = 2
    post_max: int = 100


class Rules(BaseModel):
    """Validated contents of rules.yaml. Every section has defaults."""

    model_config = ConfigDict(extra="forbid")

    tokens: TokenRules = Field(default_factory=TokenRules)
    rate_limits: RateLimitRules = Field(default_factory=RateLimitRules)
    paths: PathRules = Field(default_factory=PathRules)
    email: EmailRules = Field(default_factory=EmailRules)
    slugs: SlugRules = Field(default_factory=SlugRules)
