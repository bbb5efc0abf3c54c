"""
Literal style table for every slide the assembly engine emits.
"""

from __future__ import annotations

from storybook import __version__

from .operations import WHITE, Outline, RgbColor, Size, SolidFill, Transform

PROJECT_URL = "https://github.com/MATTALUI/storybook"

FULL_BLEED_IMAGE = Transform(scale_x=1.05, scale_y=1.05)

OVERLAY_GREY = RgbColor(0.37, 0.37, 0.37)
OUTLINE_GREY = RgbColor(0.35, 0.35, 0.35)
BUTTON_GREY = RgbColor(0.93, 0.93, 0.93)

DECORATIVE_FONT = "Pacifico"
CAPTION_FONT = "Changa One"

# Title slide
TITLE_BACKGROUND_SIZE = Size(width=720, height=405.64)
TITLE_BACKGROUND_FILL = SolidFill(color=OVERLAY_GREY, alpha=0.5)
TITLE_BACKGROUND_OUTLINE = Outline(rendered=False)
TITLE_CONTENT_ALIGNMENT = "MIDDLE"
TITLE_ALIGNMENT = "CENTER"
TITLE_FONT_SIZE = 80
TITLE_FOREGROUND = WHITE

# Page slides
PARAGRAPH_BOX_SIZE = Size(width=269, height=360)
PARAGRAPH_BOX_TRANSFORM = Transform(translate_x=15.0, translate_y=15.0)
PARAGRAPH_BOX_FILL = SolidFill(color=OVERLAY_GREY, alpha=0.69)
PARAGRAPH_BOX_OUTLINE = Outline(color=OUTLINE_GREY, weight=1, dash_style="SOLID")
PARAGRAPH_CONTENT_ALIGNMENT = "TOP"
PARAGRAPH_ALIGNMENT = "START"
PARAGRAPH_FONT_SIZE = 13
PARAGRAPH_FOREGROUND = WHITE

# Closing slide
CLOSING_SLIDE_INSERTION_INDEX = 0

MADE_WITH_TEXT = "Made With"
MADE_WITH_SIZE = Size(width=163.44, height=38.16)
MADE_WITH_TRANSFORM = Transform(translate_x=23.75, translate_y=20.88)
MADE_WITH_FONT_SIZE = 19

PRODUCT_NAME_TEXT = "Storybook"
PRODUCT_NAME_SIZE = Size(width=543.6, height=130.32)
PRODUCT_NAME_TRANSFORM = Transform(translate_x=0.0, translate_y=41.01)
PRODUCT_NAME_FONT_SIZE = 80

LINK_BUTTON_SHAPE = "ROUND_RECTANGLE"
LINK_BUTTON_SIZE = Size(width=223.2, height=44.64)
LINK_BUTTON_X = 23.76
LINK_BUTTON_FILL = SolidFill(color=BUTTON_GREY, alpha=0.85)
LINK_BUTTON_ALIGNMENT = "CENTER"
LINK_BUTTON_FONT_SIZE = 14

# (object id, label, y offset) for each closing-slide button, top to bottom.
LINK_BUTTONS = (
    ("howitworks", "How It Works", 171.36),
    ("sourcelink", "Source", 225.36),
    ("versionlink", f"Version {__version__}", 279.36),
)
