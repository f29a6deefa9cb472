# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""Tests for ModelNode composition and data access."""

import asyncio
import logging
from types import MappingProxyType

import pytest

from genro_statetree import (
    ABSENT,
    InvalidArgumentError,
    InvalidChildError,
    InvalidKeyError,
    InvalidPathError,
    ModelNode,
    NotRootError,
    deep,
    scheduling,
)


@pytest.fixture
def tree():
    """A three-level chain: a -> b -> c."""
    a, b, c = ModelNode(), ModelNode(), ModelNode()
    a.attach_child('b', b)
    b.attach_child('c', c)
    return a, b, c


class TestModelNodeIdentity:
    """Tests for key, parent, root and path."""

    def test_defaults(self):
        """Test a new node is its own root."""
        node = ModelNode()
        assert node.key is None
        assert node.parent is None
        assert node.root is node
        assert node.path == ()
        assert node.depth == 0
        assert node.is_root() is True

    def test_chain(self, tree):
        """Test identity accessors along a chain."""
        a, b, c = tree
        assert (a.key, b.key, c.key) == (None, 'b', 'c')
        assert (a.parent, b.parent, c.parent) == (None, a, b)
        assert a.root is a and b.root is a and c.root is a
        assert a.path == ()
        assert b.path == ('b',)
        assert c.path == ('b', 'c')
        assert c.depth == 2
        assert [a.is_root(), b.is_root(), c.is_root()] == [True, False, False]

    def test_resolve_path(self, tree):
        """Test relative paths resolve to absolute key tuples."""
        a, b, c = tree
        assert a.resolve_path('foo') == ('foo',)
        assert b.resolve_path('foo') == ('b', 'foo')
        assert c.resolve_path('foo.0') == ('b', 'c', 'foo', 0)

    def test_repr(self, tree):
        """Test string representation."""
        a, b, c = tree
        assert 'root' in repr(a)
        assert "'b.c'" in repr(c)

    def test_deprecated_initial_value(self):
        """Test an initial value still works but warns."""
        with pytest.warns(DeprecationWarning, match='deprecated'):
            node = ModelNode({'foo': 'bar'})
        assert node.get('foo') == 'bar'


class TestModelNodeData:
    """Tests for value access through the root store."""

    def test_value_property(self):
        """Test the value getter and setter."""
        node = ModelNode()
        assert node.value is ABSENT
        node.value = 'something'
        assert node.value == 'something'

    @pytest.mark.parametrize('attached', [False, True])
    def test_has_value_and_delete_value(self, attached):
        """Test strict existence on roots and children alike."""
        node = ModelNode()
        if attached:
            ModelNode().attach_child('child', node)
        assert node.has_value() is False
        node.set_value(None)
        assert node.has_value() is True
        node.delete_value()
        assert node.has_value() is False

    @pytest.mark.parametrize('attached', [False, True])
    def test_set_value_with_read_only_proxy(self, attached):
        """Test changing the dict behind a written proxy leaves the node alone."""
        node = ModelNode()
        if attached:
            ModelNode().attach_child('child', node)
        backing = {'a': 1}
        node.set_value(MappingProxyType(backing))
        backing['a'] = 2
        assert node.get('a') == 1

    @pytest.mark.parametrize('attached', [False, True])
    def test_get_value_and_set_value(self, attached):
        """Test whole-value access on roots and children alike."""
        node = ModelNode()
        if attached:
            ModelNode().attach_child('child', node)
        assert node.get_value() is ABSENT
        node.set_value('something')
        assert node.get_value() == 'something'

    @pytest.mark.parametrize('path', ['foo', ['foo'], [999, 'b.a.r', 'baz']])
    @pytest.mark.parametrize('attached', [False, True])
    def test_has_get_set_delete(self, path, attached):
        """Test path access with dotted and pre-parsed paths."""
        node = ModelNode()
        if attached:
            ModelNode().attach_child('child', node)
        assert node.has(path) is False
        assert node.get(path) is ABSENT
        node.set(path, 'something')
        assert node.has(path) is True
        assert node.get(path) == 'something'
        node.set(path, 'something-else')
        assert node.get(path) == 'something-else'
        node.delete(path)
        assert node.has(path) is False

    def test_child_writes_land_in_root(self, tree):
        """Test children operate on their slice of the root value."""
        a, b, c = tree
        c.set('x', 1)
        b.set('y', 2)
        assert deep.equal(a.get_value(), {'b': {'c': {'x': 1}, 'y': 2}})
        assert deep.equal(b.get_value(), {'c': {'x': 1}, 'y': 2})
        assert a.get('b.c.x') == 1

    def test_get_default(self, tree):
        """Test default for missing paths."""
        a, b, c = tree
        assert c.get('missing', 'fallback') == 'fallback'

    def test_none_path_raises(self, tree):
        """Test a None path is rejected."""
        a, b, c = tree
        with pytest.raises(InvalidPathError):
            c.get(None)
        with pytest.raises(InvalidPathError):
            c.set(None, 1)

    def test_nested_example(self):
        """Test deep set through a node."""
        node = ModelNode()
        node.set('a.0.b.c', 'ABC')
        assert deep.equal(node.value, {'a': [{'b': {'c': 'ABC'}}]})
        node.delete('a.0.b.c')
        assert node.get('a.0.b.c') is ABSENT


class TestModelNodeSubscribe:
    """Tests for subscriptions on the tree root."""

    def test_children_cannot_subscribe(self, tree):
        """Test subscribe is root-only."""
        a, b, c = tree
        with pytest.raises(NotRootError, match='not allowed on children'):
            b.subscribe(lambda old, new: None)

    def test_requires_callable(self):
        """Test subscribe validates its argument."""
        with pytest.raises(InvalidArgumentError):
            ModelNode().subscribe('nope')

    def test_child_changes_notify_root(self, tree):
        """Test a burst of child writes yields a single root notification."""
        a, b, c = tree
        calls = []
        a.subscribe(lambda old, new: calls.append((old, new)))
        assert calls == [(ABSENT, ABSENT)]
        c.set('x', 1)
        b.set('y', 2)
        assert len(calls) == 1
        scheduling.flush()
        assert len(calls) == 2
        assert calls[1][0] is ABSENT
        assert calls[1][1] is a.value

    def test_nested_changes_in_event_loop(self):
        """Test nested writes are delivered after the synchronous turn."""
        async def scenario():
            model = ModelNode()
            await asyncio.sleep(0)
            calls = []
            model.subscribe(lambda old, new: calls.append((old, new)))
            model.set('a.b.c.d', 'D')
            assert deep.equal(model.value, {'a': {'b': {'c': {'d': 'D'}}}})
            assert len(calls) == 1
            await asyncio.sleep(0)
            assert len(calls) == 2
            assert calls[1][0] is ABSENT
            assert calls[1][1] is model.value

        asyncio.run(scenario())


class TestModelNodeChildren:
    """Tests for attaching and detaching nodes."""

    @pytest.mark.parametrize('method', ['has_child', 'get_child', 'detach_child'])
    def test_non_string_key_raises(self, method):
        """Test child lookups validate the key."""
        with pytest.raises(InvalidKeyError, match='Child keys must be strings.'):
            getattr(ModelNode(), method)(1)

    def test_attach_child_validates(self):
        """Test attach_child validates key and child."""
        model = ModelNode()
        with pytest.raises(InvalidKeyError):
            model.attach_child(1, ModelNode())
        with pytest.raises(InvalidChildError, match='Child must inherit'):
            model.attach_child('foo', None)

    def test_attach_validates(self):
        """Test attach validates key and parent."""
        model = ModelNode()
        with pytest.raises(InvalidKeyError):
            model.attach(1, ModelNode())
        with pytest.raises(InvalidChildError, match='Parent must inherit'):
            model.attach('foo', None)

    def test_cannot_attach_ancestor(self, tree):
        """Test cycles are refused."""
        a, b, c = tree
        with pytest.raises(InvalidChildError):
            c.attach_child('loop', a)
        with pytest.raises(InvalidChildError):
            a.attach_child('self', a)
        assert a.is_root()

    def test_has_get_detach_child(self):
        """Test lookup around attach and detach."""
        root, a = ModelNode(), ModelNode()
        assert root.has_child('a') is False
        assert root.get_child('a') is None
        root.attach_child('a', a)
        assert root.has_child('a') is True
        assert root.get_child('a') is a
        root.detach_child('a')
        assert root.has_child('a') is False
        root.detach_child('a')

    def test_attach_detach_round(self):
        """Test attach, attach_child, detach and detach_child together."""
        root, a, b = ModelNode(), ModelNode(), ModelNode()
        a.attach('a', root)
        a.attach_child('b', b)
        b.set_value('B')
        assert root.get_child('a') is a
        assert a.get_child('b') is b
        assert deep.equal(root.value, {'a': {'b': 'B'}})
        assert deep.equal(a.value, {'b': 'B'})
        assert b.value == 'B'

        root.detach_child('a')
        assert root.get_child('a') is None
        assert a.get_child('b') is b
        assert a.is_root() and b.root is a
        assert b.path == ('b',)
        assert deep.equal(root.value, {'a': {'b': 'B'}})
        # Detached subtrees start over with an empty store.
        assert a.value is ABSENT
        assert b.value is ABSENT

        b.detach()
        assert a.get_child('b') is None
        assert b.is_root()
        b.detach()

    def test_models_exist_in_only_one_tree(self):
        """Test attaching elsewhere moves the node."""
        root1, root2, child = ModelNode(), ModelNode(), ModelNode()
        root1.attach_child('child', child)
        child.set_value('VALUE')
        assert root1.get_child('child') is child
        assert root2.get_child('child') is None
        assert deep.equal(root1.get_value(), {'child': 'VALUE'})
        assert root2.get_value() is ABSENT

        root2.attach_child('child', child)
        assert root1.has_child('child') is False
        assert root2.get_child('child') is child
        assert deep.equal(root1.get_value(), {'child': 'VALUE'})
        assert root2.get_value() is ABSENT

        child.set_value('NEW VALUE')
        assert deep.equal(root1.get_value(), {'child': 'VALUE'})
        assert deep.equal(root2.get_value(), {'child': 'NEW VALUE'})

        root1.attach_child('root2', root2)
        assert root1.get_child('root2') is root2
        assert root2.get_child('child') is child
        assert child.root is root1
        assert child.path == ('root2', 'child')
        assert root2.get_value() is ABSENT

        child.set_value('FINAL VALUE')
        assert deep.equal(
            root1.get_value(),
            {'child': 'VALUE', 'root2': {'child': 'FINAL VALUE'}},
        )
        assert deep.equal(root2.get_value(), {'child': 'FINAL VALUE'})

    def test_occupant_is_evicted(self):
        """Test attaching at a taken key detaches the previous node."""
        root, first, second = ModelNode(), ModelNode(), ModelNode()
        root.attach_child('slot', first)
        root.attach_child('slot', second)
        assert root.get_child('slot') is second
        assert first.is_root()
        assert first.path == ()

    def test_reattach_same_key_is_noop(self):
        """Test attaching a node where it already is changes nothing."""
        root, child = ModelNode(), ModelNode()
        root.attach_child('x', child)
        child.set_value(1)
        root.attach_child('x', child)
        assert child.value == 1

    def test_move_within_same_parent(self):
        """Test re-keying a child under the same parent."""
        root, child = ModelNode(), ModelNode()
        root.attach_child('old', child)
        root.attach_child('new', child)
        assert root.has_child('old') is False
        assert child.key == 'new'
        assert child.path == ('new',)

    def test_moving_subtree_recomputes_descendants(self, tree):
        """Test path and root are updated for the whole moved subtree."""
        a, b, c = tree
        other = ModelNode()
        other.attach_child('moved', b)
        assert b.root is other and c.root is other
        assert c.path == ('moved', 'c')
        c.set_value('here')
        assert deep.equal(other.value, {'moved': {'c': 'here'}})
        assert a.has_child('b') is False

    def test_children_iteration(self, tree):
        """Test children view, iter_children and walk."""
        a, b, c = tree
        d = ModelNode()
        a.attach_child('d', d)
        assert list(a.children) == ['b', 'd']
        assert list(a.iter_children()) == [('b', b), ('d', d)]
        assert list(a.walk()) == [(('b',), b), (('b', 'c'), c), (('d',), d)]
        with pytest.raises(TypeError):
            a.children['x'] = ModelNode()

    def test_attach_logs(self, caplog):
        """Test attach and detach emit debug records."""
        root, child = ModelNode(), ModelNode()
        with caplog.at_level(logging.DEBUG, logger='genro_statetree.node'):
            root.attach_child('x', child)
            child.detach()
        messages = [record.getMessage() for record in caplog.records]
        assert any(message.startswith('Attached') for message in messages)
        assert any(message.startswith('Detaching') for message in messages)

    def test_subclass(self):
        """Test behaviour can be attached by subclassing."""
        class TodoModel(ModelNode):
            def add(self, name):
                self.set(['items', len(self.get('items', ()))], {'name': name})

        root, todos = ModelNode(), TodoModel()
        root.attach_child('todos', todos)
        todos.add('milk')
        todos.add('bread')
        assert root.get('todos.items.1.name') == 'bread'
