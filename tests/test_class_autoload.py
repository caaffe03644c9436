import copy
import pickle

import pytest

from autoload import (
    AccessorHandler, Autoload, FallbackHandler, InstallCache, ResolverConfig, SynthesizingHandler,
    UnresolvedName, can_resolve, resolver_of,
)


def shout_handler(calls=None):
    def factory(name, ctx):
        if calls is not None:
            calls.append(name)

        def body(self, *args):
            return f"{type(self).__name__}.{name.upper()}{args}"
        return body
    return SynthesizingHandler(factory, accepts=lambda n: n.startswith("do_"))


class Pickled(Autoload, handler=AccessorHandler(["color"])):
    def __init__(self, color):
        self.color = color


def test_first_call_publishes_method_on_class():
    calls = []

    class Widget(Autoload, handler=shout_handler(calls)):
        pass

    w = Widget()
    assert w.do_run(1) == "Widget.DO_RUN(1,)"
    assert "do_run" in Widget.__dict__
    assert Widget().do_run() == "Widget.DO_RUN()"
    assert calls == ["do_run"]
    assert resolver_of(w).table.exists("do_run")


def test_existing_methods_are_untouched():
    class Widget(Autoload, handler=shout_handler()):
        def do_real(self):
            return "real"

    assert Widget().do_real() == "real"
    assert not resolver_of(Widget()).table.exists("do_real")


def test_declined_name_raises_python_attribute_error():
    class Widget(Autoload, handler=shout_handler()):
        pass

    with pytest.raises(AttributeError) as excinfo:
        Widget().render()
    assert str(excinfo.value) == "'Widget' object has no attribute 'render'"
    assert isinstance(excinfo.value, UnresolvedName)


def test_reserved_names_on_class():
    class Widget(Autoload, handler=shout_handler(), reserved={"do_destroy"}):
        pass

    w = Widget()
    assert not hasattr(w, "do_destroy")
    assert hasattr(w, "do_build")


def test_subclass_inherits_handler_with_own_table():
    class Base(Autoload, handler=shout_handler(), reserved={"do_destroy"}):
        pass

    class Child(Base):
        pass

    assert Child().do_walk() == "Child.DO_WALK()"
    assert "do_walk" in Child.__dict__
    assert "do_walk" not in Base.__dict__
    assert resolver_of(Child()).table is not resolver_of(Base()).table
    assert resolver_of(Child()).handler is resolver_of(Base()).handler
    assert not hasattr(Child(), "do_destroy")


def test_subclass_can_replace_handler_and_add_reserved():
    class Base(Autoload, handler=shout_handler()):
        pass

    class Child(Base, handler=AccessorHandler(["size"]), reserved={"set_size"}):
        pass

    c = Child()
    assert not hasattr(c, "do_walk")
    assert not hasattr(c, "set_size")
    c.size = 4
    assert c.get_size() == 4
    assert Base().do_walk() == "Base.DO_WALK()"


def test_class_without_handler_behaves_like_plain_class():
    class Plain(Autoload):
        pass

    with pytest.raises(UnresolvedName) as excinfo:
        Plain().anything
    assert excinfo.value.reason == UnresolvedName.MISSING


def test_class_keyword_config():
    config = ResolverConfig(reserved=frozenset({"do_secret"}))

    class Widget(Autoload, handler=shout_handler(), config=config):
        pass

    assert not can_resolve(Widget(), "do_secret")
    assert can_resolve(Widget(), "do_public")


def test_class_keyword_installer():
    installer = InstallCache()

    class Widget(Autoload, handler=shout_handler(), installer=installer):
        pass

    Widget().do_a()
    Widget().do_b()
    assert installer.installs == 2


def test_pure_interception_on_class():
    class Echo(FallbackHandler):
        caches = False

        def handle(self, request):
            return (request.name, request.args, request.target)

    class Widget(Autoload, handler=Echo()):
        pass

    w = Widget()
    assert w.anything(1) == ("anything", (1,), w)
    assert "anything" not in Widget.__dict__


def test_copy_and_pickle_do_not_reach_handler():
    calls = []

    class Widget(Autoload, handler=shout_handler(calls)):
        def __init__(self):
            self.value = 3

    clone = copy.deepcopy(Widget())
    assert clone.value == 3
    assert calls == []

    restored = pickle.loads(pickle.dumps(Pickled("red")))
    assert restored.get_color() == "red"


def test_can_resolve_agrees_with_hasattr_on_instances():
    class Widget(Autoload, handler=shout_handler(), reserved={"do_destroy"}):
        label = "w"

        def existing(self):
            pass

    w = Widget()
    for name in ["label", "existing", "do_run", "do_destroy", "render", "__del__", "__deepcopy__"]:
        assert can_resolve(w, name) == hasattr(w, name), name
