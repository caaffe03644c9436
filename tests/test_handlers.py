import pytest

from autoload import (
    AccessorHandler, Autoload, Binding, CallRequest, FallbackHandler, InterceptingHandler,
    Namespace, Synthesizer, SynthesizingHandler, UnresolvedName,
)


# --- Synthesizer Tests ---

def test_synthesizer_builds_binding_closing_over_name():
    synth = Synthesizer(lambda name, ctx: lambda target: name.upper())
    binding = synth.synthesize("render", context="ctx")
    assert isinstance(binding, Binding)
    assert binding.name == "render"
    assert binding.context == "ctx"
    assert binding(None) == "RENDER"


def test_synthesizer_requires_callable_factory():
    with pytest.raises(TypeError):
        Synthesizer("nope")


def test_synthesizer_rejects_non_callable_body():
    synth = Synthesizer(lambda name, ctx: 42)
    with pytest.raises(TypeError, match="expected a callable"):
        synth.synthesize("render")


def test_synthesizer_rejects_async_factory():
    async def factory(name, ctx):
        return lambda target: name

    with pytest.raises(TypeError, match="not an awaitable"):
        Synthesizer(factory).synthesize("render")


def test_synthesizing_twice_has_no_side_effects():
    calls = []

    def factory(name, ctx):
        def body(target):
            calls.append(name)
            return name
        return body

    synth = Synthesizer(factory)
    first = synth.synthesize("render")
    second = synth.synthesize("render")
    assert calls == []
    assert first(None) == second(None) == "render"
    assert calls == ["render", "render"]


# --- FallbackHandler Tests ---

def test_base_handler_declines_in_handle():
    handler = FallbackHandler()
    assert handler.accepts("anything", None)
    assert handler.synthesize("anything", None) is None
    with pytest.raises(UnresolvedName) as excinfo:
        handler.handle(CallRequest("anything"))
    assert excinfo.value.reason == UnresolvedName.DECLINED


def test_base_handler_reports_nothing_resolvable():
    ns = Namespace(FallbackHandler())
    assert not FallbackHandler().can_resolve("render", ns)
    assert not ns.can_resolve("render")
    with pytest.raises(UnresolvedName):
        ns.call("render")


def test_handler_overriding_only_accepts_still_declines():
    class OnlyGet(FallbackHandler):
        def accepts(self, name, target):
            return name.startswith("get")

    ns = Namespace(OnlyGet())
    assert not ns.can_resolve("get_x")
    with pytest.raises(UnresolvedName):
        ns.call("get_x")


def test_can_resolve_defaults_to_accepts():
    class OnlyGet(FallbackHandler):
        def accepts(self, name, target):
            return name.startswith("get")

        def synthesize(self, name, target):
            return Binding(func=lambda t: name, name=name)

    handler = OnlyGet()
    assert handler.can_resolve("get_x", None)
    assert not handler.can_resolve("put_x", None)


def test_handle_override_counts_as_resolving():
    class Echo(FallbackHandler):
        def handle(self, request):
            return request.name

    ns = Namespace(Echo())
    assert ns.can_resolve("ping")
    assert ns.call("ping") == "ping"


# --- SynthesizingHandler Tests ---

def test_synthesizing_handler_predicate():
    handler = SynthesizingHandler(lambda name, ctx: lambda t: name, accepts=lambda n: n.startswith("get_"))
    assert handler.accepts("get_user", None)
    assert not handler.accepts("drop_table", None)


def test_synthesizing_handler_uses_target_as_default_context():
    handler = SynthesizingHandler(lambda name, ctx: lambda t: name)
    binding = handler.synthesize("render", "the-target")
    assert binding.context == "the-target"


def test_binding_closes_over_context_at_creation():
    handler = SynthesizingHandler(lambda name, ctx: lambda t: f"{ctx}:{name}", context="v1")
    ns = Namespace(handler)
    assert ns.call("ident") == "v1:ident"
    handler.context = "v2"
    assert ns.call("ident") == "v1:ident"
    assert ns.call("other") == "v2:other"


# --- InterceptingHandler Tests ---

def test_intercepting_handler_does_not_cache():
    handler = InterceptingHandler(lambda req: req.name)
    assert handler.caches is False
    assert handler.synthesize("x", None) is None
    assert handler.handle(CallRequest("x")) == "x"


def test_intercepting_handler_predicate():
    handler = InterceptingHandler(lambda req: None, accepts=lambda n: n == "log")
    assert handler.accepts("log", None)
    assert not handler.accepts("other", None)


# --- AccessorHandler Tests ---

def test_accessor_handler_on_namespace():
    ns = Namespace(AccessorHandler(["color", "size"]))
    assert ns.set_color("red") == "red"
    assert ns.get_color() == "red"
    assert ns.call("set_size", 3) == 3
    assert ns.call("get_size") == 3
    assert sorted(ns.installed) == ["get_color", "get_size", "set_color", "set_size"]


def test_accessor_handler_declines_undeclared_fields():
    ns = Namespace(AccessorHandler(["color"]))
    assert not ns.can_resolve("get_weight")
    with pytest.raises(UnresolvedName) as excinfo:
        ns.call("get_weight")
    assert excinfo.value.reason == UnresolvedName.DECLINED


def test_accessor_getter_before_set_raises_attribute_error():
    ns = Namespace(AccessorHandler(["color"]))
    with pytest.raises(AttributeError):
        ns.get_color()


def test_accessor_handler_custom_prefixes():
    handler = AccessorHandler(["name"], get_prefix="read_", set_prefix="write_")
    assert handler.accepts("read_name", None)
    assert handler.accepts("write_name", None)
    assert not handler.accepts("get_name", None)


def test_accessor_handler_on_class():
    class Person(Autoload, handler=AccessorHandler(["name"])):
        pass

    p = Person()
    p.set_name("Ada")
    assert p.get_name() == "Ada"
    assert "get_name" in Person.__dict__
    assert Person.get_name.__name__ == "get_name"
