"""Recursive boolean condition expressions of legacy response processing.

Modelled as a tagged union discriminated on ``op`` rather than a class
hierarchy. These trees are analysis input only and are never rewritten.
"""

from typing import List, Union, Literal, Iterator, Optional, Annotated

from pydantic import Field

from qtimigrator.models.common import QTIModel


COMPARISON_OPS = ("varlt", "varlte", "vargt", "vargte", "varsubset", "varinside", "varsubstring")


class VarEqual(QTIModel):
    op: Literal["varequal"] = "varequal"
    resp_ident: str = ""
    case: Optional[str] = None
    value: str = ""


class VarCompare(QTIModel):
    """Relational or set test other than equality."""

    op: Literal["varlt", "varlte", "vargt", "vargte", "varsubset", "varinside", "varsubstring"]
    resp_ident: str = ""
    value: str = ""
    # setmatch, areamatch or case, depending on the operator
    qualifier: Optional[str] = None


class Not(QTIModel):
    op: Literal["not"] = "not"
    operands: List["Condition"] = Field(default_factory=list)


class And(QTIModel):
    op: Literal["and"] = "and"
    operands: List["Condition"] = Field(default_factory=list)


class Or(QTIModel):
    op: Literal["or"] = "or"
    operands: List["Condition"] = Field(default_factory=list)


Condition = Annotated[Union[VarEqual, VarCompare, Not, And, Or], Field(discriminator="op")]

Not.model_rebuild()
And.model_rebuild()
Or.model_rebuild()


class ConditionVar(QTIModel):
    """Top-level expressions of one ``conditionvar``."""

    expressions: List[Condition] = Field(default_factory=list)

    def top_level_equalities(self) -> List[VarEqual]:
        return [e for e in self.expressions if isinstance(e, VarEqual)]

    def nested_equalities(self) -> List[VarEqual]:
        """Equality tests that sit below a combinator."""
        found: List[VarEqual] = []
        for expression in self.expressions:
            if isinstance(expression, (Not, And, Or)):
                found.extend(e for e in walk(expression) if isinstance(e, VarEqual))
        return found


def walk(expression) -> Iterator:
    """Yield ``expression`` and every sub-expression, depth first."""
    yield expression
    for operand in getattr(expression, "operands", ()):
        yield from walk(operand)
