import textwrap

import pytest

from mermaid_parser.diagram_model import ERRelationshipKind as Kind
from mermaid_parser.er_diagram import (
    ERDiagramScanner, ERScanState, parse_attribute, parse_er_diagram, parse_relationship,
)
from mermaid_parser.errors import InvalidSyntaxError, ParseError, ValidationError


def parse(source):
    return parse_er_diagram(textwrap.dedent(source))


# ─── Relationships ────────────────────────────────────────────────

def test_one_to_many():
    result = parse("""
        erDiagram
            CUSTOMER ||--o{ ORDER : places
    """)
    assert result.to_json() == {
        "entities": [{"name": "CUSTOMER"}, {"name": "ORDER"}],
        "relationships": [{
            "from": "CUSTOMER",
            "to": "ORDER",
            "type": "ONE_TO_MANY",
            "label": "places",
            "cardinality": {"from": "exactly one", "to": "zero or more"},
        }],
    }


def test_quoted_label():
    rel = parse_relationship('CUSTOMER }|..|{ DELIVERY-ADDRESS : "uses for delivery"')
    assert rel.kind is Kind.MANY_TO_MANY
    assert rel.target == "DELIVERY-ADDRESS"
    assert rel.label == "uses for delivery"


def test_relationship_without_label():
    rel = parse_relationship("PERSON ||--|| PASSPORT")
    assert rel.kind is Kind.ONE_TO_ONE
    assert rel.label is None


def test_multiple_relationships_register_entities_once():
    result = parse("""
        erDiagram
            CUSTOMER ||--o{ ORDER : places
            ORDER ||--|{ LINE-ITEM : contains
            CUSTOMER }|..|{ DELIVERY-ADDRESS : uses
    """)
    assert [e.name for e in result.entities] == [
        "CUSTOMER", "ORDER", "LINE-ITEM", "DELIVERY-ADDRESS",
    ]
    assert [r.kind for r in result.relationships] == [
        Kind.ONE_TO_MANY, Kind.ONE_TO_MANY, Kind.MANY_TO_MANY,
    ]


@pytest.mark.parametrize("line, source, target, kind", [
    ("CAR 1 to zero or more NAMED-DRIVER : allows",
     "exactly one", "zero or more", Kind.ONE_TO_ZERO_OR_MANY),
    ("PERSON many(0) optionally to 0+ NAMED-DRIVER : is",
     "zero or more", "zero or more", Kind.MANY_TO_MANY),
    ("ENTITY1 1 to 0+ ENTITY2 : relates",
     "exactly one", "zero or more", Kind.ONE_TO_ZERO_OR_MANY),
    ("ENTITY1 1+ to 1 ENTITY2 : relates",
     "one or more", "exactly one", Kind.MANY_TO_ONE),
    ("PERSON only one to only one PASSPORT : holds",
     "exactly one", "exactly one", Kind.ONE_TO_ONE),
])
def test_natural_language_relationships(line, source, target, kind):
    result = parse_er_diagram("erDiagram\n" + line)
    rel = result.relationships[0]
    assert (rel.cardinality.source, rel.cardinality.target) == (source, target)
    assert rel.kind is kind


@pytest.mark.parametrize("line", [
    "USER some to some GROUP : belongs",
    "USER unknown to unknown GROUP : belongs",
    "USER few to few GROUP : belongs",
])
def test_unknown_natural_language_is_an_error(line):
    with pytest.raises(ParseError, match="Invalid syntax"):
        parse_er_diagram("erDiagram\n" + line)


def test_unknown_symbol_is_an_error():
    with pytest.raises(ParseError, match=r"Invalid syntax: A \|\|==o\{ B"):
        parse_er_diagram("erDiagram\nA ||==o{ B")


# ─── Attributes ───────────────────────────────────────────────────

def test_attribute_with_key_and_comment():
    member = parse_attribute('string driversLicense PK "The license #"')
    assert member.name == "driversLicense"
    assert member.data_type == "string"
    assert member.keys == ["PK"]
    assert member.comment == "The license #"
    assert member.length is None


def test_attribute_with_length():
    member = parse_attribute('string(99) firstName "c"')
    assert (member.data_type, member.length, member.comment) == ("string", 99, "c")


def test_attribute_multiple_keys():
    member = parse_attribute("int id PK, FK")
    assert member.keys == ["PK", "FK"]


def test_comment_keys_are_not_counted():
    member = parse_attribute('string code "not a PK"')
    assert member.keys == []
    assert member.comment == "not a PK"


def test_entity_block():
    result = parse("""
        erDiagram
            CAR {
                string registrationNumber PK
                string make
                int year "Model year"
            }
    """)
    assert result.to_json()["entities"] == [{
        "name": "CAR",
        "members": [
            {"name": "registrationNumber", "dataType": "string", "keys": ["PK"]},
            {"name": "make", "dataType": "string"},
            {"name": "year", "dataType": "int", "comment": "Model year"},
        ],
    }]


def test_malformed_attribute_lines_are_skipped():
    result = parse("""
        erDiagram
            USER {
                string
                int age
            }
    """)
    assert result.to_json()["entities"] == [
        {"name": "USER", "members": [{"name": "age", "dataType": "int"}]},
    ]


def test_empty_block_has_no_members():
    result = parse("""
        erDiagram
            USER {
            }
    """)
    assert result.to_json()["entities"] == [{"name": "USER"}]


def test_block_after_relationship_reuses_entity(order_er_source):
    result = parse_er_diagram(order_er_source)
    customer = result.entities[0]
    assert customer.name == "CUSTOMER"
    assert [m.name for m in customer.members] == ["name", "email"]
    assert customer.members[1].keys == ["UK"]
    assert customer.members[1].length == 99
    assert len(result.entities) == 3


# ─── Scan state and errors ────────────────────────────────────────

def test_frontmatter_is_skipped(order_er_source):
    result = parse_er_diagram(order_er_source)
    assert len(result.relationships) == 2


def test_scanner_states():
    scanner = ERDiagramScanner()
    scanner.feed("---")
    assert scanner.state is ERScanState.IN_FRONTMATTER
    scanner.feed("title: not a relationship")
    scanner.feed("---")
    assert scanner.state is ERScanState.SCANNING
    scanner.feed("USER {")
    assert scanner.state is ERScanState.IN_ENTITY_BLOCK
    scanner.feed("}")
    assert scanner.state is ERScanState.SCANNING


@pytest.mark.parametrize("source", ["", "   \n  "])
def test_empty_input(source):
    with pytest.raises(ValidationError, match="Empty input provided"):
        parse_er_diagram(source)


def test_missing_keyword():
    with pytest.raises(InvalidSyntaxError, match="missing 'erDiagram' keyword"):
        parse_er_diagram("invalid syntax")


def test_unmatched_line():
    with pytest.raises(ParseError, match="Invalid syntax: this is not valid"):
        parse("""
            erDiagram
                this is not valid
        """)


def test_parse_is_deterministic(order_er_source):
    assert parse_er_diagram(order_er_source).to_json() == \
        parse_er_diagram(order_er_source).to_json()


# ─── CLI ──────────────────────────────────────────────────────────

def test_cli_writes_json(tmp_path, monkeypatch, order_er_source):
    from mermaid_parser.er_diagram import main

    src = tmp_path / "order.mmd"
    out = tmp_path / "out" / "order.json"
    src.write_text(order_er_source, encoding="utf-8")
    monkeypatch.setattr("sys.argv", ["er_diagram", "--input", str(src), "--output", str(out)])

    assert main() == 0
    assert '"CUSTOMER"' in out.read_text(encoding="utf-8")


def test_cli_reports_errors(tmp_path, monkeypatch, capsys):
    from mermaid_parser.er_diagram import main

    src = tmp_path / "bad.mmd"
    src.write_text("invalid syntax", encoding="utf-8")
    monkeypatch.setattr("sys.argv", ["er_diagram", "-i", str(src)])

    assert main() == 1
    assert "missing 'erDiagram' keyword" in capsys.readouterr().err


def test_entity_name_starting_with_keyword():
    result = parse("""
        erDiagram
            erDiagramLog {
                string id PK
            }
    """)
    assert result.to_json()["entities"] == [
        {"name": "erDiagramLog", "members": [{"name": "id", "dataType": "string", "keys": ["PK"]}]},
    ]
