from storefront.catalog.models import Attribute, Term
from storefront.logic.attributes import AttributeKind, classify_attribute, classify_name, find_attribute


def _attribute(name, options, slug=""):
    return Attribute(id=1, name=name, slug=slug, terms=[Term(id=i, name=o, slug=o) for i, o in enumerate(options)])


def test_classify_by_name():
    assert classify_name("Selecciona el color") is AttributeKind.COLOR
    assert classify_name("pa_selecciona-el-color") is AttributeKind.COLOR
    assert classify_name("Selecciona una talla") is AttributeKind.SIZE
    assert classify_name("Tamaño") is AttributeKind.SIZE
    assert classify_name("Material") is AttributeKind.OTHER


def test_numeric_terms_classify_as_size():
    assert classify_attribute(_attribute("Horma", ["38", "39", "40.5"])) is AttributeKind.SIZE
    assert classify_attribute(_attribute("Horma", ["Ancha", "38"])) is AttributeKind.OTHER


def test_color_wins_over_numeric_terms():
    assert classify_attribute(_attribute("Color", ["1", "2"])) is AttributeKind.COLOR


def test_slug_is_used_when_name_is_generic():
    assert classify_attribute(_attribute("Opción", ["Negro"], slug="pa_color")) is AttributeKind.COLOR


def test_find_attribute():
    attributes = [_attribute("Material", ["Cuero"]), _attribute("Color", ["Negro"]), _attribute("Talla", ["S", "M"])]
    assert find_attribute(attributes, AttributeKind.COLOR).name == "Color"
    assert find_attribute(attributes, AttributeKind.SIZE).name == "Talla"
    assert find_attribute(attributes[:1], AttributeKind.COLOR) is None
