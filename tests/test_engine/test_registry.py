"""Tests for the transform registry."""

import pytest

from winglets.engine.context import PipelineContext
from winglets.engine.registry import Layer, TransformRegistry, TransformSpec


def _noop(ctx: PipelineContext) -> None:
    pass


def test_register_and_get():
    reg = TransformRegistry()
    spec = TransformSpec(id="T0.01", layer=Layer.GLOBAL, fn=_noop)
    reg.register(spec)
    assert reg.get("T0.01") is spec
    assert reg.count == 1


def test_duplicate_id_rejected():
    reg = TransformRegistry()
    reg.register(TransformSpec(id="T0.01", layer=Layer.GLOBAL, fn=_noop))
    with pytest.raises(ValueError, match="Duplicate"):
        reg.register(TransformSpec(id="T0.01", layer=Layer.GLOBAL, fn=_noop))


def test_get_layer():
    reg = TransformRegistry()
    reg.register(TransformSpec(id="T0.01", layer=Layer.GLOBAL, fn=_noop))
    reg.register(TransformSpec(id="T1.01", layer=Layer.CATEGORY, fn=_noop))
    layer0 = reg.get_layer(Layer.GLOBAL)
    assert [s.id for s in layer0] == ["T0.01"]


def test_get_layer_is_dependency_ordered():
    reg = TransformRegistry()
    reg.register(TransformSpec(id="T1.01", layer=Layer.CATEGORY, fn=_noop, dependencies=["T1.02"]))
    reg.register(TransformSpec(id="T1.02", layer=Layer.CATEGORY, fn=_noop))
    assert [s.id for s in reg.get_layer(Layer.CATEGORY)] == ["T1.02", "T1.01"]


def test_resolve_order_with_deps():
    reg = TransformRegistry()
    reg.register(TransformSpec(id="T0.01", layer=Layer.GLOBAL, fn=_noop))
    reg.register(TransformSpec(id="T1.03", layer=Layer.CATEGORY, fn=_noop, dependencies=["T0.01"]))
    ids = [s.id for s in reg.resolve_order({"T1.03"})]
    assert ids.index("T0.01") < ids.index("T1.03")


def test_resolve_order_all():
    reg = TransformRegistry()
    for i in range(5):
        reg.register(TransformSpec(id=f"T1.0{i+1}", layer=Layer.CATEGORY, fn=_noop))
    assert len(reg.resolve_order(None)) == 5


def test_circular_dependency():
    reg = TransformRegistry()
    reg.register(TransformSpec(id="T1.01", layer=Layer.CATEGORY, fn=_noop, dependencies=["T1.02"]))
    reg.register(TransformSpec(id="T1.02", layer=Layer.CATEGORY, fn=_noop, dependencies=["T1.01"]))
    with pytest.raises(ValueError, match="Circular"):
        reg.resolve_order()


def test_global_transform_cannot_depend_on_category_transform():
    reg = TransformRegistry()
    reg.register(TransformSpec(id="T1.01", layer=Layer.CATEGORY, fn=_noop))
    with pytest.raises(ValueError, match="cannot depend"):
        reg.register(TransformSpec(id="T0.01", layer=Layer.GLOBAL, fn=_noop, dependencies=["T1.01"]))
