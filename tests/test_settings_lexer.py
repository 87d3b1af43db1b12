"""
Settings and lexer tests

Tests the pydantic settings that seed each ParseContext, and the Pygments
lexer used to echo sanitized expressions.
"""

import pytest
from pydantic import ValidationError
from pygments.token import Keyword, Name, Punctuation, String

from texguard.config import AppSettings
from texguard.lib.lexer import MathTexLexer
from texguard.models import ImageMethod, ImageType, MathMode


class TestSettings:
    """Test AppSettings and context creation"""

    def test_defaults(self):
        """Default context flags"""
        context = AppSettings().context_make(verbosity=2)
        assert context.mathmode == MathMode.DISPLAY
        assert context.fontsize == 4
        assert context.imagetype == ImageType.PNG
        assert context.image_method == ImageMethod.DVIPNG
        assert context.gamma == "2.5"
        assert not context.gamma_explicit
        assert context.verbosity == 2

    def test_gamma_follows_image_method(self):
        """Without an explicit gamma the image method picks it"""
        context = AppSettings(image_method=2).context_make()
        assert context.gamma == "0.5"

    def test_explicit_gamma(self):
        """A configured gamma is explicit"""
        context = AppSettings(gamma="1.0").context_make()
        assert context.gamma == "1.0"
        assert context.gamma_explicit

    def test_imagetype(self):
        """Image type is read by name"""
        assert AppSettings(imagetype="gif").context_make().imagetype == ImageType.GIF

    def test_invalid(self):
        """Out-of-range values are rejected"""
        with pytest.raises(ValidationError):
            AppSettings(imagetype="jpg")
        with pytest.raises(ValidationError):
            AppSettings(fontsize=10)

    def test_environment(self, monkeypatch):
        """TEXGUARD_ environment variables override defaults"""
        monkeypatch.setenv("TEXGUARD_FONTSIZE", "7")
        monkeypatch.setenv("TEXGUARD_CACHING", "false")
        settings = AppSettings()
        assert settings.fontsize == 7
        assert settings.caching is False

    def test_fresh_contexts(self):
        """Each call builds an independent context"""
        settings = AppSettings()
        first = settings.context_make()
        second = settings.context_make()
        first.packages.append(("color", ""))
        assert second.packages == []


class TestLexer:
    """Test MathTexLexer token types"""

    def tokens_get(self, source):
        return [(token, value) for token, value in MathTexLexer().get_tokens(source) if value.strip()]

    def test_driver_directive(self):
        """texguard's own directives are keywords"""
        tokens = self.tokens_get(r"\eval{fs}")
        assert tokens[0] == (Keyword, r"\eval")
        assert tokens[1] == (Punctuation, "{")

    def test_control_word(self):
        """Other control words are functions"""
        tokens = self.tokens_get(r"\frac{a}{b}")
        assert tokens[0] == (Name.Function, r"\frac")

    def test_driver_prefix_is_not_keyword(self):
        """\\evaluate is not \\eval"""
        tokens = self.tokens_get(r"\evaluate")
        assert tokens[0] == (Name.Function, r"\evaluate")

    def test_math_shift(self):
        """Dollars are math shifts"""
        tokens = self.tokens_get("$x$")
        assert tokens[0] == (String.Backtick, "$")

    def test_notice(self):
        """Validator notices are highlighted as a whole"""
        tokens = self.tokens_get(r"\mbox{~\underline{\textbackslash input~not~permitted}~} y")
        assert tokens[0] == (Name.Decorator, r"\mbox")
        assert (Name.Decorator, "~not~permitted}~}") in tokens
        assert all(token != Name.Function for token, _ in tokens)
