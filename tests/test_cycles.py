import unittest

import pytest
from services import Clock

from zapinject import CyclicDependencyError, Injector, ResolutionError, UnresolvedDependencyError


class A:
    def __init__(self, b: "B"):
        self.b = b


class B:
    def __init__(self, a: A):
        self.a = a


class SelfNeedy:
    def __init__(self, me: "SelfNeedy"):
        self.me = me


class Head:
    def __init__(self, middle: "Middle"):
        self.middle = middle


class Middle:
    def __init__(self, tail: "Tail"):
        self.tail = tail


class Tail:
    def __init__(self, head: Head):
        self.head = head


class TestCycleDetection(unittest.TestCase):
    cont: Injector

    def setUp(self):
        self.cont = Injector()

    def test_get_self_bound_pair_raises(self):
        self.cont.register(A)
        self.cont.register(B)

        with pytest.raises(CyclicDependencyError) as ctx:
            self.cont.get(A)

        assert ctx.value.key is A
        assert ctx.value.chain == (A, B, A)
        assert "Recursive dependency: A is currently instantiating (A -> B -> A)" in str(ctx.value)

    def test_create_self_bound_pair_raises(self):
        self.cont.register(A)
        self.cont.register(B)

        # create(A) is not on the stack itself, so the loop closes on B
        with pytest.raises(CyclicDependencyError) as ctx:
            self.cont.create(A)

        assert ctx.value.key is B
        assert ctx.value.chain == (B, A, B)

    def test_type_depending_on_itself_raises(self):
        self.cont.register(SelfNeedy)

        with pytest.raises(CyclicDependencyError) as ctx:
            self.cont.get(SelfNeedy)
        assert ctx.value.chain == (SelfNeedy, SelfNeedy)

    def test_longer_cycle_raises(self):
        self.cont.register(Head).register(Middle).register(Tail)

        with pytest.raises(CyclicDependencyError) as ctx:
            self.cont.get(Middle)
        assert ctx.value.chain == (Middle, Tail, Head, Middle)

    def test_factory_calling_get_on_its_own_key_raises(self):
        def factory(injector: Injector) -> Clock:
            return injector.get(Clock)

        self.cont.register(Clock, factory)

        with pytest.raises(CyclicDependencyError):
            self.cont.get(Clock)

    def test_cyclic_dependency_is_a_resolution_error(self):
        self.cont.register(SelfNeedy)
        with pytest.raises(ResolutionError):
            self.cont.get(SelfNeedy)

    def test_resolution_stack_is_empty_after_failure(self):
        self.cont.register(A)
        self.cont.register(B)

        with pytest.raises(CyclicDependencyError):
            self.cont.get(A)

        assert self.cont._resolving == []
        assert not self.cont._instances.get(A)
        assert not self.cont._instances.get(B)

    def test_cycle_is_broken_by_registering_an_instance(self):
        self.cont.register(A)
        self.cont.register(B)
        with pytest.raises(CyclicDependencyError):
            self.cont.get(A)

        a = A.__new__(A)
        self.cont.register(A, a)

        b = self.cont.get(B)
        assert b.a is a

    def test_stack_is_restored_when_a_dependency_is_missing(self):
        self.cont.register(A)

        with pytest.raises(UnresolvedDependencyError) as ctx:
            self.cont.get(A)

        assert ctx.value.key is B
        assert self.cont._resolving == []
