"""Element and attribute vocabularies of the mid and new generations.

Both generations share one document shape for item bodies and declarations;
only names differ. Readers and writers work in mid-generation names and
translate through a ``Vocabulary``.
"""

from typing import Dict, Optional

from qtimigrator.models import qti21 as b
from qtimigrator.models import qti30 as c
from qtimigrator.transform.qti21_to_30 import ELEMENT_NAMES_30, ATTRIBUTE_NAMES_30


class Vocabulary:
    def __init__(
        self,
        models: Dict[str, type],
        elements: Optional[Dict[str, str]] = None,
        attributes: Optional[Dict[str, str]] = None,
    ):
        self.models = models
        self.elements = elements or {}
        self.attributes = attributes or {}

    def el(self, name: str) -> str:
        return self.elements.get(name, name)

    def at(self, name: str) -> str:
        return self.attributes.get(name, name)

    def model(self, name: str) -> type:
        return self.models[name]


QTI21 = Vocabulary(
    models={
        "p": b.Paragraph21,
        "div": b.Division21,
        "choiceInteraction": b.ChoiceInteraction21,
        "simpleChoice": b.SimpleChoice21,
        "textEntryInteraction": b.TextEntryInteraction21,
        "extendedTextInteraction": b.ExtendedTextInteraction21,
        "itemBody": b.ItemBody21,
        "responseDeclaration": b.ResponseDeclaration21,
        "mapping": b.Mapping21,
        "mapEntry": b.MapEntry21,
        "outcomeDeclaration": b.OutcomeDeclaration21,
        "templateDeclaration": b.TemplateDeclaration21,
        "modalFeedback": b.ModalFeedback21,
    },
)

QTI30 = Vocabulary(
    models={
        "p": c.Paragraph30,
        "div": c.Division30,
        "choiceInteraction": c.ChoiceInteraction30,
        "simpleChoice": c.SimpleChoice30,
        "textEntryInteraction": c.TextEntryInteraction30,
        "extendedTextInteraction": c.ExtendedTextInteraction30,
        "itemBody": c.ItemBody30,
        "responseDeclaration": c.ResponseDeclaration30,
        "mapping": c.Mapping30,
        "mapEntry": c.MapEntry30,
        "outcomeDeclaration": c.OutcomeDeclaration30,
        "templateDeclaration": c.TemplateDeclaration30,
        "modalFeedback": c.ModalFeedback30,
    },
    elements=ELEMENT_NAMES_30,
    attributes=ATTRIBUTE_NAMES_30,
)
