"""Markup helpers: control wrapper, fullscreen modal, inline error block."""

from __future__ import annotations

import copy
import re

from bs4 import BeautifulSoup, Tag

from blogsmith.diagrams.theme import merge_style

WRAPPER_CLASS = "diagram-wrapper"
MODAL_CLASS = "diagram-modal"
MODAL_CLOSE_CLASS = "diagram-modal-close"

_SVG_NS = "http://www.w3.org/2000/svg"

# (action, title, label)
CONTROLS: tuple[tuple[str, str, str], ...] = (
    ("fullscreen", "View Fullscreen", "Fullscreen"),
    ("copy", "Copy Diagram", "Copy"),
    ("download", "Download as SVG", "Download"),
)


def has_class(tag: Tag, name: str) -> bool:
    classes = tag.get("class") or []
    if isinstance(classes, str):
        classes = classes.split()
    return name in classes


def add_class(tag: Tag, name: str) -> None:
    classes = tag.get("class") or []
    if isinstance(classes, str):
        classes = classes.split()
    if name not in classes:
        tag["class"] = [*classes, name]


def find_wrapper(element: Tag) -> Tag | None:
    for parent in element.parents:
        if isinstance(parent, Tag) and has_class(parent, WRAPPER_CLASS):
            return parent
    return None


def wrap_with_controls(soup: BeautifulSoup, element: Tag) -> tuple[Tag, bool]:
    """Wrap ``element`` in a controls container.

    Returns ``(wrapper, created)``; an element that is already wrapped keeps
    its existing wrapper.
    """
    existing = find_wrapper(element)
    if existing is not None:
        return existing, False

    wrapper = soup.new_tag("div", attrs={"class": WRAPPER_CLASS})
    element.wrap(wrapper)

    controls = soup.new_tag("div", attrs={"class": "diagram-controls"})
    for action, title, label in CONTROLS:
        btn = soup.new_tag(
            "button",
            attrs={
                "type": "button",
                "class": f"diagram-btn {action}-btn",
                "title": title,
                "data-action": action,
            },
        )
        btn.string = label
        controls.append(btn)
    wrapper.append(controls)
    return wrapper, True


def build_modal(soup: BeautifulSoup, element: Tag) -> tuple[Tag, Tag]:
    """Clone ``element`` into a fullscreen overlay. Returns ``(modal, clone)``."""
    modal = soup.new_tag("div", attrs={"class": MODAL_CLASS})
    content = soup.new_tag("div", attrs={"class": "diagram-modal-content"})
    close = soup.new_tag(
        "button", attrs={"type": "button", "class": MODAL_CLOSE_CLASS, "aria-label": "Close"}
    )
    close.string = "×"

    clone = copy.copy(element)
    if clone.get("id"):
        clone["data-clone-of"] = clone["id"]
        del clone["id"]
    merge_style(clone, {"max-width": "90vw", "max-height": "90vh"})

    content.append(close)
    content.append(clone)
    modal.append(content)
    return modal, clone


def build_error_block(soup: BeautifulSoup, heading: str, source: str, error: str) -> Tag:
    """Inline error shown in place of a diagram that failed to render."""
    block = soup.new_tag("div", attrs={"class": "diagram-error"})

    h4 = soup.new_tag("h4")
    h4.string = heading
    block.append(h4)

    intro = soup.new_tag("p")
    intro.string = "Unable to render diagram. Please check the syntax:"
    block.append(intro)

    pre = soup.new_tag("pre")
    code = soup.new_tag("code")
    code.string = source
    pre.append(code)
    block.append(pre)

    detail = soup.new_tag("p")
    strong = soup.new_tag("strong")
    strong.string = "Error:"
    detail.append(strong)
    detail.append(f" {error}")
    block.append(detail)
    return block


# html.parser lowercases names; these are the SVG names that are camelCase.
_SVG_CASE = {
    name.lower(): name
    for name in (
        "altGlyph", "animateMotion", "animateTransform", "attributeName", "baseFrequency",
        "calcMode", "clipPath", "clipPathUnits", "diffuseConstant", "feBlend",
        "feColorMatrix", "feComponentTransfer", "feComposite", "feDiffuseLighting",
        "feDisplacementMap", "feDistantLight", "feDropShadow", "feFlood", "feFuncA",
        "feFuncB", "feFuncG", "feFuncR", "feGaussianBlur", "feImage", "feMerge",
        "feMergeNode", "feMorphology", "feOffset", "fePointLight", "feSpecularLighting",
        "feSpotLight", "feTile", "feTurbulence", "filterUnits", "foreignObject",
        "glyphRef", "gradientTransform", "gradientUnits", "kernelMatrix", "keyPoints",
        "keySplines", "keyTimes", "lengthAdjust", "linearGradient", "markerHeight",
        "markerUnits", "markerWidth", "maskContentUnits", "maskUnits", "numOctaves",
        "pathLength", "patternContentUnits", "patternTransform", "patternUnits",
        "pointsAtX", "pointsAtY", "pointsAtZ", "preserveAlpha", "preserveAspectRatio",
        "primitiveUnits", "radialGradient", "refX", "refY", "repeatCount", "repeatDur",
        "requiredExtensions", "requiredFeatures", "specularConstant", "specularExponent",
        "spreadMethod", "startOffset", "stdDeviation", "stitchTiles", "surfaceScale",
        "systemLanguage", "tableValues", "targetX", "targetY", "textLength", "textPath",
        "viewBox", "viewTarget", "xChannelSelector", "yChannelSelector", "zoomAndPan",
    )
}

# Tag names after "<" or "</", attribute names before "=".
_SVG_NAME_RE = re.compile(r"(?<=<)(/?)([A-Za-z]+)|(?<=\s)([A-Za-z]+)(?==)")

# Outermost <svg> element in renderer output, without any XML prolog or comments.
_RAW_SVG_RE = re.compile(r"<svg\b.*</svg\s*>|<svg\b[^>]*/>", re.DOTALL | re.IGNORECASE)
_SVG_OPEN_RE = re.compile(r"<svg\b[^>]*>", re.IGNORECASE)


def extract_svg(markup: str) -> str | None:
    """The raw <svg> element from rendered markup, untouched, or None."""
    m = _RAW_SVG_RE.search(markup)
    return m.group(0) if m else None


def standalone_svg(raw: str) -> str:
    """Ensure the root <svg> declares the SVG namespace."""
    opening = _SVG_OPEN_RE.search(raw)
    if opening is None or "xmlns=" in opening.group(0):
        return raw
    return raw[: opening.start()] + f'<svg xmlns="{_SVG_NS}"' + raw[opening.start() + 4 :]


def _restore_svg_case(markup: str) -> str:
    def fix(m: re.Match) -> str:
        if m.group(2) is not None:
            return m.group(1) + _SVG_CASE.get(m.group(2), m.group(2))
        return _SVG_CASE.get(m.group(3), m.group(3))

    return _SVG_NAME_RE.sub(fix, markup)


def svg_markup(element: Tag, raw: str | None = None) -> str | None:
    """Standalone serialization of the diagram's SVG, or None.

    ``raw`` is the renderer's own output and is preferred; otherwise the
    element's first <svg> is serialized with SVG name casing restored.
    """
    if raw is not None:
        return standalone_svg(raw)
    svg = element.find("svg")
    if svg is None:
        return None
    svg = copy.copy(svg)
    if not svg.get("xmlns"):
        svg["xmlns"] = _SVG_NS
    return _restore_svg_case(str(svg))


def markup_nodes(markup: str) -> list:
    """Parse rendered markup into nodes ready to insert into the page.

    When the markup holds an <svg>, only that element is kept (XML prologs and
    comments around it are dropped).
    """
    fragment = BeautifulSoup(markup, "html.parser")
    svg = fragment.find("svg")
    if svg is not None:
        return [svg.extract()]
    return [node.extract() for node in list(fragment.contents)]
