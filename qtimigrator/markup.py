"""Best-effort markup normalization applied to embedded content.

These are string heuristics, not an HTML parser: they only make the common
legacy fragments well-formed enough for the next schema generation.
"""

import re
from typing import Iterable
from html.entities import name2codepoint

from qtimigrator.models.common import MatImage, Material


_CLASS_ATTR = re.compile(r"(?<![\w-])class=")
_OBJECT_OPEN = re.compile(r"<object(?=[\s/>])")
_NAMED_ENTITY = re.compile(r"&([A-Za-z][A-Za-z0-9]*);")
_XML_ENTITIES = {"amp", "lt", "gt", "quot", "apos"}


def self_close_html(content: str) -> str:
    """Normalize HTML from legacy ``mattext`` for the mid generation.

    Bare ``<br>`` and ``<hr>`` become self-closing. When the fragment holds an
    ``<img`` tag and no ``/>`` anywhere, every ``>`` is rewritten to ``/>``.
    """
    content = content.replace("<br>", "<br/>").replace("<hr>", "<hr/>")
    if "/>" not in content and "<img" in content:
        content = content.replace(">", "/>")
    return content


def image_tag(image: MatImage) -> str:
    tag = f'<img src="{image.uri}"'
    if image.width > 0:
        tag += f' width="{image.width}"'
    if image.height > 0:
        tag += f' height="{image.height}"'
    return tag + " />"


def material_fragments(material: Material) -> Iterable[str]:
    """Yield one fragment per text block, then one per image."""
    for text in material.texts:
        yield self_close_html(text.content) if text.is_html else text.content
    for image in material.images:
        yield image_tag(image)


def material_markup(material: Material) -> str:
    return "".join(material_fragments(material))


def rewrite_for_qti30(content: str) -> str:
    """Rename ``class`` attributes and ``object`` elements for the new generation."""
    content = _CLASS_ATTR.sub("data-qti-class=", content)
    content = _OBJECT_OPEN.sub("<qti-object", content)
    content = content.replace("</object>", "</qti-object>")
    return content


def has_class_attribute(content: str) -> bool:
    return bool(_CLASS_ATTR.search(content or ""))


def numeric_entities(content: str) -> str:
    """Replace HTML named entities (``&nbsp;``) with numeric character references.

    The five XML entities and unknown names are left untouched.
    """

    def replace(match: re.Match) -> str:
        name = match.group(1)
        if name in _XML_ENTITIES or name not in name2codepoint:
            return match.group(0)
        return f"&#{name2codepoint[name]};"

    return _NAMED_ENTITY.sub(replace, content)
