from typing import Any, Callable, Generic, Type, TypeVar, cast

RT = TypeVar("RT")


class cached_property(Generic[RT]):
    """Property computed once per instance, then read from the instance dict.

    Assigning the attribute overrides the cached value and deleting it makes
    the next read compute it again.

    Examples:
        .. sourcecode:: python

            @cached_property
            def deployment(self):
                return self.prepare_deployment()
    """

    def __init__(self, fget: Callable[[Any], RT]) -> None:
        self.__get = fget
        self.__doc__ = fget.__doc__
        self.__name__ = fget.__name__
        self.__module__ = fget.__module__

    def __get__(self, obj: Any, type: Type = None) -> RT:
        if obj is None:
            return cast(RT, self)
        try:
            return cast(RT, obj.__dict__[self.__name__])
        except KeyError:
            value = obj.__dict__[self.__name__] = self.__get(obj)
            return value

    def __set__(self, obj: Any, value: RT) -> None:
        obj.__dict__[self.__name__] = value

    def __delete__(self, obj: Any) -> None:
        obj.__dict__.pop(self.__name__, None)
