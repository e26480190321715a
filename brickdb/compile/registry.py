"""Compiler registry (Open/Closed Principle).

``CompilerFactory`` is the single dialect-keyed strategy table: every place
that renders dialect-sensitive SQL (LIMIT fragments, joined deletes,
catalogue queries) asks the registered :class:`~brickdb.compile.base.SQLCompiler`
instead of branching on the dialect itself.

Usage::

    from brickdb.compile.registry import CompilerFactory

    @CompilerFactory.register(Dialect.MYSQL)
    class MySQLCompiler(SQLCompiler):
        ...

    compiler = CompilerFactory.create("mysql")
"""

from __future__ import annotations

from collections.abc import Callable
from typing import ClassVar

from brickdb.compile.base import SQLCompiler
from brickdb.errors import CompilationError
from brickdb.schema.dialect import Dialect


class CompilerFactory:
    """Registry mapping :class:`Dialect` values to :class:`SQLCompiler` classes.

    Callers register a compiler class once; the builder and the execution
    layer create instances on demand via :meth:`create`.
    """

    _compilers: ClassVar[dict[Dialect, type[SQLCompiler]]] = {}

    @classmethod
    def register(
        cls, dialect: Dialect | str
    ) -> Callable[[type[SQLCompiler]], type[SQLCompiler]]:
        """Decorator that registers a compiler class under ``dialect``.

        Args:
            dialect: The dialect (or its name) the compiler targets.

        Returns:
            A decorator that registers and returns the compiler class.
        """

        def decorator(compiler_cls: type[SQLCompiler]) -> type[SQLCompiler]:
            cls.register_class(dialect, compiler_cls)
            return compiler_cls

        return decorator

    @classmethod
    def register_class(cls, dialect: Dialect | str, compiler_cls: type[SQLCompiler]) -> None:
        """Register a compiler class without using the decorator form."""
        cls._compilers[Dialect.parse(dialect)] = compiler_cls

    @classmethod
    def create(cls, dialect: Dialect | str) -> SQLCompiler:
        """Instantiate the compiler registered for ``dialect``.

        Raises:
            CompilationError: If ``dialect`` is unknown or has no compiler.
        """
        try:
            key = Dialect.parse(dialect)
        except ValueError:
            key = None
        compiler_cls = cls._compilers.get(key) if key is not None else None
        if compiler_cls is None:
            registered = cls.registered_targets()
            raise CompilationError(
                f"Unsupported dialect target: '{dialect}'. Registered targets: {registered}."
            )
        return compiler_cls()

    @classmethod
    def registered_targets(cls) -> list[str]:
        """Return the sorted list of registered dialect names."""
        return sorted(d.value for d in cls._compilers)
