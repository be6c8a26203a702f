"""Lark grammar definition for progression formulas.

The grammar runs on the prepared expression, after variable names have been
replaced by their numeric values. It supports:
- Arithmetic: +, -, *, / and ^ (power, right-associative)
- Unary plus and minus, binding tighter than ^ (so -2^2 is 4)
- Function calls: NAME(arg1, arg2, ...)
- Bare names, which are reported as unresolved variables
"""

# Lark grammar for formula parsing
FORMULA_GRAMMAR = r"""
    ?start: expression

    // Operator chains stay flat: one tree node per precedence level,
    // however many operators the chain has
    ?expression: term
        | term ((PLUS | MINUS) term)+ -> add_chain

    ?term: power
        | power ((STAR | SLASH) power)+ -> mul_chain

    ?power: unary
        | unary (CARET unary)+ -> pow_chain

    ?unary: atom
        | MINUS unary -> neg
        | PLUS unary -> pos

    ?atom: NUMBER -> number
        | NAME "(" arguments ")" -> function_call
        | NAME -> name
        | "(" expression ")"

    arguments: expression ("," expression)*

    PLUS: "+"
    MINUS: "-"
    STAR: "*"
    SLASH: "/"
    CARET: "^"

    NAME: /[A-Za-z_][A-Za-z0-9_]*/

    // Also matches malformed literals such as 1.2.3, rejected on conversion
    NUMBER: /(\d[\d.]*|\.[\d.]+)([eE][+-]?\d+)?/

    %import common.WS
    %ignore WS
"""
