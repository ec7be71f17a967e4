'''Serialization of ballotbox objects to JSON-ready dictionaries.

Policies and winner evaluators are decorated with
:func:`simple_serialization`, which gives them a ``to_dict()`` method built
from their constructor parameters. Elections provide their own ``to_dict()``
and ``from_dict()`` since their state is not given by the constructor.
'''

import sys
import inspect
import importlib
from typing import Any, List, Dict, Callable


def simple_serialization(class_: type) -> type:
    '''A decorator to provide a simple to_dict() serialization method.

    The resulting method serializes the object attributes named like the
    class's constructor parameters, so the class must store its parameters
    unchanged.

    :param class_: The class to add the method to.
    '''
    param_names = [
        name for name in inspect.signature(class_.__init__).parameters.keys()
        if name not in ('self', 'args', 'kwargs')
    ]

    def to_dict(self) -> Dict[str, Any]:
        out_dict = {'class': scoped_class_name(self)}
        for attr in param_names:
            out_dict[attr] = serialize_value(getattr(self, attr))
        return out_dict

    class_.to_dict = to_dict
    return class_


def serialize_value(value: Any) -> Any:
    if hasattr(value, 'to_dict'):
        return value.to_dict()
    elif isinstance(value, tuple(ATOMIC_TYPES)):
        return value
    elif type(value) in CONVERTIBLE_TYPES:
        return CONVERTIBLE_TYPES[type(value)](value)
    elif isinstance(value, dict):
        if all(isinstance(key, str) for key in value.keys()):
            return {key: serialize_value(val) for key, val in value.items()}
        else:
            return {
                'type': 'dict',
                'keys': [serialize_value(key) for key in value.keys()],
                'values': [serialize_value(val) for val in value.values()],
            }
    elif isinstance(value, list):
        return [serialize_value(val) for val in value]
    else:
        raise ValueError(f'cannot serialize {value!r} to dict format')


def deserialize_value(value: Any) -> Any:
    if isinstance(value, dict):
        if 'type' in value and is_scoped_identifier(value['type']):
            return deserialize_typed(value)
        elif 'class' in value and is_scoped_identifier(value['class']):
            return deserialize_class(value)
        else:
            return {key: deserialize_value(val) for key, val in value.items()}
    elif isinstance(value, tuple(ATOMIC_TYPES)):
        return value
    elif isinstance(value, list):
        return [deserialize_value(val) for val in value]
    else:
        raise ValueError(f'cannot deserialize {value!r}, type unknown')


def deserialize_typed(typedef: Dict[str, Any]) -> Any:
    typeobj = get_object(typedef['type'])
    if typeobj is dict:
        return dict(zip(
            [deserialize_value(key) for key in typedef['keys']],
            [deserialize_value(val) for val in typedef['values']]
        ))
    elif 'value' in typedef:
        return typeobj(deserialize_value(typedef['value']))
    else:
        raise ValueError(f'invalid typed value contents: {typedef!r}')


def deserialize_class(clsdef: Dict[str, Any]) -> Any:
    cls = get_object(clsdef['class'])
    if not isinstance(cls, type):
        raise ValueError(f'not a class: {clsdef["class"]}')
    params = {key: val for key, val in clsdef.items() if key != 'class'}
    if hasattr(cls, 'from_dict'):
        return cls.from_dict(params)
    else:
        return cls(**{
            key: deserialize_value(val) for key, val in params.items()
        })


def get_object(identifier: str) -> Any:
    if '.' not in identifier:
        if identifier not in BUILTIN_TYPES:
            raise ValueError(f'refusing to load builtin {identifier}')
        return BUILTIN_TYPES[identifier]
    module, name = identifier.rsplit('.', 1)
    if module != 'ballotbox' and not module.startswith('ballotbox.'):
        raise ValueError(f'refusing to load {identifier}: not a ballotbox object')
    try:
        if module not in sys.modules:
            importlib.import_module(module)
        return getattr(sys.modules[module], name)
    except (ImportError, AttributeError) as e:
        raise ValueError(f'cannot load {identifier}: {e}') from e


def from_dict(value: Dict[str, Any]) -> Any:
    """Parse a ballotbox object from a JSON-like dictionary.

    :param value: A dictionary created by :func:`to_dict`.
    """
    if not isinstance(value, dict):
        raise ValueError('invalid ballotbox object def: dict expected, '
                         f'got {value!r}')
    elif 'class' not in value:
        raise ValueError('invalid ballotbox object def: must have a class key')
    elif not is_scoped_identifier(value['class']):
        inval_cls = value['class']
        raise ValueError(f'invalid ballotbox class def: {inval_cls}')
    else:
        return deserialize_value(value)


def to_dict(obj: Any) -> Dict[str, Any]:
    """Serialize a ballotbox object to a JSON-ready dictionary.

    :param obj: An election, policy or evaluator object. It should provide
        a `to_dict()` method.
    """
    return serialize_value(obj)


def is_scoped_identifier(value: Any) -> bool:
    return (
        isinstance(value, str)
        and not value.startswith('.')
        and all(chunk.isidentifier() for chunk in value.split('.'))
    )


def scoped_class_name(value: Any) -> str:
    cls = value.__class__
    return '.'.join((cls.__module__, cls.__name__))


def sequence_to_json_factory(typeobj):
    typename = typeobj.__name__

    def sequence_to_json(seq) -> Dict[str, Any]:
        return {'type': typename, 'value': [serialize_value(v) for v in seq]}

    return sequence_to_json


ATOMIC_TYPES: List[type] = [
    str, int, float, bool, type(None),
]

# identities may be tuples or frozensets; keep them hashable on the way back
CONVERTIBLE_TYPES: Dict[type, Callable] = {
    seqtype: sequence_to_json_factory(seqtype)
    for seqtype in (tuple, frozenset)
}

# the only builtins the serialization above refers to by name
BUILTIN_TYPES: Dict[str, type] = {
    typeobj.__name__: typeobj for typeobj in (dict, tuple, frozenset)
}
