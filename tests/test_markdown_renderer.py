import pytest

from studybuddy.schemas.common import RenderVariant
from studybuddy.services.markdown_renderer import render_line, render_markdown


@pytest.mark.parametrize(
    "line, expected",
    [
        ("# Photosynthesis", "<h1>Photosynthesis</h1>"),
        ("##The Core Stuff", "<h2>The Core Stuff</h2>"),
        ("###   Light reactions  ", "<h3>Light reactions</h3>"),
        ("#### Deep header", "<h1>Deep header</h1>"),
        ("", '<div class="spacer"></div>'),
        ("   ", '<div class="spacer"></div>'),
        ("Plain sentence.", "<p>Plain sentence.</p>"),
    ],
)
def test_block_elements(line, expected):
    assert render_line(line) == expected


def test_bullets_with_bold_standard():
    assert render_line("- uses **chlorophyll** daily") == "<li>uses <strong>chlorophyll</strong> daily</li>"
    assert render_line("* second item") == "<li>second item</li>"


def test_line_starting_with_bold_is_a_paragraph():
    assert render_line("**Key** idea") == "<p><strong>Key</strong> idea</p>"


def test_handwritten_highlight_colour_is_deterministic():
    # "abc" has length 3 -> fourth colour
    html = render_line("Remember **abc** now", RenderVariant.handwritten)
    assert html == '<p>Remember <span class="highlight marker-blue">abc</span> now</p>'
    assert render_line("**abcd**", "handwritten") == '<p><span class="highlight marker-yellow">abcd</span></p>'


def test_handwritten_bullets_get_a_star():
    assert render_line("- ATP", RenderVariant.handwritten) == '<li><span class="star">★</span>ATP</li>'


def test_text_is_escaped():
    assert render_line("a < b & **<i>**") == "<p>a &lt; b &amp; <strong>&lt;i&gt;</strong></p>"


def test_render_markdown_wraps_every_line():
    html = render_markdown("# Title\n\n- point", "handwritten")

    assert html.startswith('<div class="notes notes-handwritten">')
    assert html.endswith("</div>")
    assert "<h1>Title</h1>" in html
    assert '<div class="spacer"></div>' in html
    assert '<span class="star">★</span>point' in html
