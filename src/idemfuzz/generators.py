# Copyright (c) Syntropy Systems
"""Random program generators.

Each backend is a callable ``(max_depth, rng) -> source``. Backends draw
only from the ``random.Random`` they are handed, so a seeded rng gives a
reproducible stream of programs.
"""
from __future__ import annotations

import ast
import io
import random
import tokenize
from typing import Callable

from idemfuzz.errors import UnknownBackendError

GeneratorFn = Callable[[int, random.Random], str]

NAMES = ("a", "b", "x", "y", "value", "items", "self", "_tmp", "result")
ATTRS = ("real", "append", "keys", "name", "__class__")
EXCEPTIONS = ("ValueError", "KeyError", "Exception", "OSError")
MODULES = ("os", "sys", "os.path", "collections", "itertools")
STRINGS = ("", "text", "it's", 'say "hi"', "tab\tand\nnewline", "\\", "ünïcode")
COMMENTS = ("noqa", "type: ignore", "fmt: skip", "TODO", "", "pragma: no cover")
PADDING = (0, 0, 0, 1, 2, 4)

BIN_OPS = (
    ast.Add, ast.Sub, ast.Mult, ast.Div, ast.FloorDiv, ast.Mod, ast.Pow,
    ast.LShift, ast.RShift, ast.BitOr, ast.BitAnd, ast.BitXor, ast.MatMult,
)
UNARY_OPS = (ast.Not, ast.USub, ast.UAdd, ast.Invert)
CMP_OPS = (
    ast.Eq, ast.NotEq, ast.Lt, ast.LtE, ast.Gt, ast.GtE,
    ast.Is, ast.IsNot, ast.In, ast.NotIn,
)


def _node(cls: type[ast.AST], **fields: object) -> ast.AST:
    # Drop fields the running interpreter's node type doesn't know about
    return cls(**{name: value for name, value in fields.items() if name in cls._fields})


class AstBuilder:
    """Builds a random ast.Module no deeper than max_depth."""

    def __init__(self, rng: random.Random, max_depth: int) -> None:
        if max_depth <= 0:
            msg = f"max_depth must be positive, got {max_depth}"
            raise ValueError(msg)
        self.rng = rng
        self.max_depth = max_depth

    def module(self) -> ast.Module:
        body = [
            self.stmt(self.max_depth, in_function=False, in_loop=False)
            for _ in range(self.rng.randint(1, 4))
        ]
        module = ast.Module(body=body, type_ignores=[])
        return ast.fix_missing_locations(module)

    # -- expressions -------------------------------------------------------

    def name(self, ctx: ast.expr_context | None = None) -> ast.Name:
        return ast.Name(id=self.rng.choice(NAMES), ctx=ctx or ast.Load())

    def constant(self) -> ast.expr:
        choice = self.rng.randrange(6)
        if choice == 0:
            value: object = self.rng.randint(0, 10**self.rng.randint(1, 12))
        elif choice == 1:
            value = self.rng.choice((0.5, 1.0, 3.14, 1e-7, 2.5e10))
        elif choice == 2:
            value = self.rng.choice(STRINGS)
        elif choice == 3:
            value = self.rng.choice((b"", b"bytes", b"\x00"))
        elif choice == 4:
            value = self.rng.choice((True, False, None))
        else:
            value = self.rng.choice((..., 1j))
        return _node(ast.Constant, value=value, kind=None)

    def leaf(self) -> ast.expr:
        return self.name() if self.rng.random() < 0.5 else self.constant()

    def arguments(self, count: int) -> ast.arguments:
        names = self.rng.sample(NAMES, count)
        return _node(
            ast.arguments,
            posonlyargs=[],
            args=[_node(ast.arg, arg=n, annotation=None, type_comment=None) for n in names],
            vararg=None,
            kwonlyargs=[],
            kw_defaults=[],
            kwarg=None,
            defaults=[],
        )

    def exprs(self, depth: int, low: int, high: int) -> list[ast.expr]:
        return [self.expr(depth) for _ in range(self.rng.randint(low, high))]

    def expr(self, depth: int) -> ast.expr:  # noqa: PLR0911
        if depth <= 1 or self.rng.random() < 0.3:
            return self.leaf()
        d = depth - 1
        kind = self.rng.randrange(15)
        if kind == 0:
            return ast.BinOp(
                left=self.expr(d), op=self.rng.choice(BIN_OPS)(), right=self.expr(d)
            )
        if kind == 1:
            return ast.UnaryOp(op=self.rng.choice(UNARY_OPS)(), operand=self.expr(d))
        if kind == 2:
            return ast.BoolOp(
                op=self.rng.choice((ast.And, ast.Or))(), values=self.exprs(d, 2, 3)
            )
        if kind == 3:
            comparators = self.exprs(d, 1, 2)
            return ast.Compare(
                left=self.expr(d),
                ops=[self.rng.choice(CMP_OPS)() for _ in comparators],
                comparators=comparators,
            )
        if kind == 4:
            func = self.name() if self.rng.random() < 0.6 else self.attribute(d)
            keywords = [
                ast.keyword(arg=arg, value=self.expr(d))
                for arg in self.rng.sample(NAMES, self.rng.randint(0, 2))
            ]
            return ast.Call(func=func, args=self.exprs(d, 0, 3), keywords=keywords)
        if kind == 5:
            return self.attribute(d)
        if kind == 6:
            return self.subscript(d, ast.Load())
        if kind == 7:
            return ast.List(elts=self.exprs(d, 0, 4), ctx=ast.Load())
        if kind == 8:
            return ast.Tuple(elts=self.exprs(d, 0, 4), ctx=ast.Load())
        if kind == 9:
            return ast.Set(elts=self.exprs(d, 1, 3))
        if kind == 10:
            keys = self.exprs(d, 0, 3)
            return ast.Dict(keys=keys, values=[self.expr(d) for _ in keys])
        if kind == 11:
            return ast.IfExp(test=self.expr(d), body=self.expr(d), orelse=self.expr(d))
        if kind == 12:
            return ast.Lambda(
                args=self.arguments(self.rng.randint(0, 2)), body=self.expr(d)
            )
        if kind == 13:
            generator = _node(
                ast.comprehension,
                target=self.name(ast.Store()),
                iter=self.expr(d),
                ifs=self.exprs(d, 0, 1),
                is_async=0,
            )
            return ast.ListComp(elt=self.expr(d), generators=[generator])
        return ast.NamedExpr(target=self.name(ast.Store()), value=self.expr(d))

    def attribute(self, depth: int, ctx: ast.expr_context | None = None) -> ast.Attribute:
        value = self.name() if depth <= 1 else self.expr(depth - 1)
        return ast.Attribute(value=value, attr=self.rng.choice(ATTRS), ctx=ctx or ast.Load())

    def subscript(self, depth: int, ctx: ast.expr_context) -> ast.Subscript:
        if self.rng.random() < 0.3:
            index: ast.expr = ast.Slice(
                lower=self.rng.choice((None, self.leaf())),
                upper=self.rng.choice((None, self.leaf())),
                step=self.rng.choice((None, None, self.leaf())),
            )
        else:
            index = self.expr(depth - 1)
        return ast.Subscript(value=self.name(), slice=index, ctx=ctx)

    def target(self, depth: int) -> ast.expr:
        kind = self.rng.randrange(4)
        if kind == 0:
            return ast.Tuple(
                elts=[self.name(ast.Store()) for _ in range(self.rng.randint(2, 3))],
                ctx=ast.Store(),
            )
        if kind == 1:
            return self.attribute(1, ast.Store())
        if kind == 2:
            return self.subscript(max(depth, 2), ast.Store())
        return self.name(ast.Store())

    # -- statements --------------------------------------------------------

    def body(self, depth: int, *, in_function: bool, in_loop: bool) -> list[ast.stmt]:
        return [
            self.stmt(depth, in_function=in_function, in_loop=in_loop)
            for _ in range(self.rng.randint(1, 3))
        ]

    def stmt(self, depth: int, *, in_function: bool, in_loop: bool) -> ast.stmt:
        if depth <= 1 or self.rng.random() < 0.4:
            return self.simple_stmt(depth, in_function=in_function, in_loop=in_loop)
        return self.compound_stmt(depth - 1, in_function=in_function, in_loop=in_loop)

    def simple_stmt(  # noqa: PLR0911
        self, depth: int, *, in_function: bool, in_loop: bool
    ) -> ast.stmt:
        kind = self.rng.randrange(11)
        if kind == 0:
            return _node(
                ast.Assign,
                targets=[self.target(depth) for _ in range(self.rng.randint(1, 2))],
                value=self.expr(depth),
                type_comment=None,
            )
        if kind == 1:
            return ast.AugAssign(
                target=self.name(ast.Store()),
                op=self.rng.choice(BIN_OPS)(),
                value=self.expr(depth),
            )
        if kind == 2:
            return ast.AnnAssign(
                target=self.name(ast.Store()),
                annotation=self.name(),
                value=self.rng.choice((None, self.expr(depth))),
                simple=1,
            )
        if kind == 3:
            return ast.Delete(targets=[self.name(ast.Del())])
        if kind == 4:
            return ast.Assert(test=self.expr(depth), msg=self.rng.choice((None, self.leaf())))
        if kind == 5:
            exc = ast.Call(
                func=ast.Name(id=self.rng.choice(EXCEPTIONS), ctx=ast.Load()),
                args=self.exprs(depth, 0, 1),
                keywords=[],
            )
            return ast.Raise(exc=exc, cause=None)
        if kind == 6:
            module = self.rng.choice(MODULES)
            if self.rng.random() < 0.5:
                return ast.Import(names=[ast.alias(name=module, asname=None)])
            return ast.ImportFrom(
                module=module,
                names=[ast.alias(name=self.rng.choice(NAMES), asname=None)],
                level=0,
            )
        if kind == 7 and in_function:
            return ast.Return(value=self.rng.choice((None, self.expr(depth))))
        if kind == 8 and in_loop:
            return self.rng.choice((ast.Break, ast.Continue))()
        if kind == 9:
            return ast.Pass()
        return ast.Expr(value=self.expr(depth))

    def compound_stmt(self, depth: int, *, in_function: bool, in_loop: bool) -> ast.stmt:
        kind = self.rng.randrange(7)
        if kind == 0:
            orelse = (
                self.body(depth, in_function=in_function, in_loop=in_loop)
                if self.rng.random() < 0.4
                else []
            )
            return ast.If(
                test=self.expr(depth),
                body=self.body(depth, in_function=in_function, in_loop=in_loop),
                orelse=orelse,
            )
        if kind == 1:
            return ast.While(
                test=self.expr(depth),
                body=self.body(depth, in_function=in_function, in_loop=True),
                orelse=[],
            )
        if kind == 2:
            return _node(
                ast.For,
                target=self.name(ast.Store()),
                iter=self.expr(depth),
                body=self.body(depth, in_function=in_function, in_loop=True),
                orelse=[],
                type_comment=None,
            )
        if kind == 3:
            item = ast.withitem(
                context_expr=self.expr(depth),
                optional_vars=self.rng.choice((None, self.name(ast.Store()))),
            )
            return _node(
                ast.With,
                items=[item],
                body=self.body(depth, in_function=in_function, in_loop=in_loop),
                type_comment=None,
            )
        if kind == 4:
            handler = ast.ExceptHandler(
                type=ast.Name(id=self.rng.choice(EXCEPTIONS), ctx=ast.Load()),
                name=self.rng.choice((None, "exc")),
                body=self.body(depth, in_function=in_function, in_loop=in_loop),
            )
            finalbody = (
                self.body(depth, in_function=in_function, in_loop=in_loop)
                if self.rng.random() < 0.3
                else []
            )
            return ast.Try(
                body=self.body(depth, in_function=in_function, in_loop=in_loop),
                handlers=[handler],
                orelse=[],
                finalbody=finalbody,
            )
        if kind == 5:
            decorators = [self.name() for _ in range(self.rng.randint(0, 1))]
            return _node(
                ast.FunctionDef,
                name="f" + self.rng.choice(NAMES),
                args=self.arguments(self.rng.randint(0, 3)),
                body=self.body(depth, in_function=True, in_loop=False),
                decorator_list=decorators,
                returns=self.rng.choice((None, self.name())),
                type_comment=None,
                type_params=[],
            )
        return _node(
            ast.ClassDef,
            name="C" + self.rng.choice(NAMES),
            bases=[self.name() for _ in range(self.rng.randint(0, 2))],
            keywords=[],
            body=self.body(depth, in_function=False, in_loop=False),
            decorator_list=[],
            type_params=[],
        )


def generate_unparse(max_depth: int, rng: random.Random) -> str:
    """Random AST rendered by ast.unparse (canonical spacing)."""
    return ast.unparse(AstBuilder(rng, max_depth).module())


def respace(source: str, rng: random.Random) -> str:
    """Re-emit source token by token with random gaps and trailing comments."""
    tokens: list[tuple[int, str]] = []
    for tok in tokenize.generate_tokens(io.StringIO(source).readline):
        if tok.type == tokenize.NEWLINE and rng.random() < 0.25:
            comment = rng.choice(COMMENTS)
            tokens.append((tokenize.COMMENT, f"# {comment}".rstrip()))
        string = tok.string
        # Padding only ever follows a token, so indentation is untouched
        if tok.type in (tokenize.NAME, tokenize.NUMBER, tokenize.OP):
            string += " " * rng.choice(PADDING)
        tokens.append((tok.type, string))
    return tokenize.untokenize(tokens)


def generate_tokens(max_depth: int, rng: random.Random) -> str:
    """Random AST with non-canonical spacing and comments."""
    return respace(generate_unparse(max_depth, rng), rng)


_GENERATORS: dict[str, GeneratorFn] = {
    "ast": generate_unparse,
    "tokens": generate_tokens,
}


def register_generator(name: str, fn: GeneratorFn) -> None:
    """Make a generator backend selectable by name."""
    _GENERATORS[name] = fn


def list_generators() -> list[str]:
    """Registered generator names, sorted."""
    return sorted(_GENERATORS)


def get_generator(name: str) -> GeneratorFn:
    """Look up a generator backend by name."""
    try:
        return _GENERATORS[name]
    except KeyError:
        raise UnknownBackendError("generator", name, list_generators()) from None
