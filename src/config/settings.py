"""
Application settings and configuration

Uses pydantic-settings for type-safe configuration via environment variables.
All settings use TEXGUARD_ prefix (e.g., TEXGUARD_MAX_EXPRESSION_SIZE=16384).

Settings can also be loaded from a .env file in the project root.
"""

from typing import Optional, TYPE_CHECKING

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

if TYPE_CHECKING:
    from ..models.context import ParseContext


class AppSettings(BaseSettings):
    """
    Application configuration via environment variables.

    Environment variables use TEXGUARD_ prefix.

    Examples:
        TEXGUARD_MAX_EXPRESSION_SIZE=16384
        TEXGUARD_FONTSIZE=5
        TEXGUARD_DENYLIST_FILE=/etc/texguard/denylist.yaml
    """

    model_config = SettingsConfigDict(
        env_prefix="TEXGUARD_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Engine limits
    max_expression_size: int = Field(
        default=32767,
        gt=0,
        description="Maximum expression length; longer input is truncated on entry",
    )

    recursion_limit: int = Field(
        default=99,
        gt=0,
        description="Maximum \\eval{} evaluator recursion depth before returning the error sentinel",
    )

    max_optional_args: int = Field(
        default=8,
        ge=0,
        description="Number of optional [args] stored per directive occurrence",
    )

    max_packages: int = Field(
        default=9,
        ge=0,
        description="Maximum number of \\usepackage{} directives honoured",
    )

    # Rendering defaults
    fontsize: int = Field(default=4, ge=0, le=9, description="Default font size index (\\tiny=0 ... \\Huge=9)")
    mathmode: int = Field(default=0, ge=0, le=2, description="0=display, 1=text, 2=paragraph")
    imagetype: str = Field(default="png", pattern="^(gif|png)$", description="Output image type")
    latex_method: int = Field(default=1, ge=1, le=2, description="1=latex, 2=pdflatex")
    image_method: int = Field(default=1, ge=1, le=2, description="1=dvipng, 2=dvips/convert")
    density: str = Field(default="120", description="Rendering density (dpi)")
    gamma: Optional[str] = Field(
        default=None,
        description="Gamma correction; None picks 2.5 for dvipng and 0.5 for convert",
    )
    quiet: int = Field(default=3, ge=0, description="Quiet level passed to the renderer")
    caching: bool = Field(default=True, description="Cache rendered images")
    depth: bool = Field(default=False, description="Use the depth-reporting wrapper document")

    # Wrapper document
    document_class: str = Field(default="article", description="LaTeX document class")
    class_options: str = Field(default="10pt", description="LaTeX document class options")

    # Denylist extension
    denylist_file: Optional[str] = Field(
        default=None,
        description="YAML file with extra denylist rows checked ahead of the built-in table",
    )

    def context_make(self, verbosity: int = 1) -> "ParseContext":
        """
        Build a fresh ParseContext seeded with these defaults.

        Args:
            verbosity: Logging verbosity carried by the context

        Returns:
            New ParseContext for one request
        """
        from ..models.context import ParseContext, MathMode, ImageType, LatexMethod, ImageMethod

        context = ParseContext(
            mathmode=MathMode(self.mathmode),
            fontsize=self.fontsize,
            imagetype=ImageType[self.imagetype.upper()],
            latex_method=LatexMethod(self.latex_method),
            image_method=ImageMethod(self.image_method),
            density=self.density,
            gamma=self.gamma or "",
            gamma_explicit=self.gamma is not None,
            quiet=self.quiet,
            caching=self.caching,
            depth=self.depth,
            verbosity=verbosity,
        )
        if not context.gamma:
            context.gamma = context.gamma_default()
        return context


# Singleton instance - import this in your code
appsettings = AppSettings()
