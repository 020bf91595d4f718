from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True)


class Author(_Frozen):
    name: str
    email: str
    url: str
    github: str


class Analytics(_Frozen):
    google_analytics_id: str = ""
    microsoft_clarity_id: str = ""


class Social(_Frozen):
    github: str
    twitter: str
    linkedin: str


class SiteConfig(_Frozen):
    site_name: str
    site_description: str
    site_url: str
    site_keywords: tuple[str, ...] = ()
    author: Author
    site_github: str
    site_email: str
    site_language: str = "en"
    site_locale: str = "en_US"
    site_type: str = "website"
    site_twitter: str = ""
    og_image: str = "/og-image.png"
    favicon: str = "/favicon.ico"
    apple_touch_icon: str = "/apple-touch-icon.png"
    manifest: str = "/manifest.json"
    theme_color: str = "#000000"
    background_color: str = "#ffffff"
    analytics: Analytics = Field(default_factory=Analytics)
    social: Social
    features: tuple[str, ...] = ()

    def page_title(self, title: str | None = None) -> str:
        if not title:
            return self.site_name
        return f"{title} • {self.site_name}"


SITE_CONFIG = SiteConfig(
    site_name="Linkeun Mono",
    site_description=(
        "All-in-one platform for link management and developer tools. Shorten URLs, "
        "track analytics, and access 16+ powerful utilities including QR generators, "
        "JSON formatters, and text analyzers."
    ),
    site_url="https://dash.linkeun.com",
    site_keywords=(
        "link shortener",
        "URL shortener",
        "developer tools",
        "QR code generator",
        "JSON formatter",
        "text analyzer",
        "password generator",
        "base64 encoder",
        "timestamp converter",
        "open graph generator",
        "ASCII art generator",
        "markdown editor",
        "fake data generator",
        "link analytics",
        "click tracking",
    ),
    author=Author(
        name="Hanivan Rizky S",
        email="hanivan@linkeun.com",
        url="https://hanivan.my.id",
        github="https://github.com/Hanivan",
    ),
    site_github="https://github.com/linkeunid",
    site_email="support@linkeun.com",
    site_twitter="@linkeunid",
    social=Social(
        github="https://github.com/linkeunid/linkeun-app",
        twitter="https://twitter.com/linkeunid",
        linkedin="https://linkedin.com/company/linkeunid",
    ),
    features=(
        "Link Shortening & Management",
        "Click Analytics & Tracking",
        "16+ Developer Tools",
        "QR Code Generation",
        "JSON Formatting & Validation",
        "Password Generation with Security Check",
        "Text Analysis & Processing",
        "Multi-format Encoding/Decoding",
        "Open Graph Meta Tag Generation",
        "Timestamp Conversion Utilities",
    ),
)
