"""Pygments lexers for GDScript and the Godot shading language.

Each grammar is an ordered table of rules; on overlap the earlier rule wins,
so the tables must stay tuples.  A rule marked ``lookbehind`` matches a prefix
in its first group that is not part of the token and is lexed again with the
same grammar.
"""

from __future__ import annotations

from typing import NamedTuple

from pygments.lexer import RegexLexer, bygroups, this, using, words
from pygments.lexers import get_lexer_by_name
from pygments.token import (
    Comment,
    Keyword,
    Name,
    Number,
    Operator,
    Punctuation,
    String,
    Text,
    Whitespace,
)


class Rule(NamedTuple):
    category: str
    pattern: str
    token: object
    lookbehind: bool = False


GDSCRIPT_GLOBAL_FUNCTIONS = (
    "abs", "absf", "absi", "acos", "acosh", "angle_difference", "asin", "asinh",
    "atan", "atan2", "atanh", "bezier_derivative", "bezier_interpolate",
    "bytes_to_var", "bytes_to_var_with_objects", "ceil", "ceilf", "ceili",
    "clamp", "clampf", "clampi", "cos", "cosh", "cubic_interpolate",
    "cubic_interpolate_angle", "cubic_interpolate_angle_in_time",
    "cubic_interpolate_in_time", "db_to_linear", "deg_to_rad", "ease",
    "error_string", "exp", "floor", "floorf", "floori", "fmod", "fposmod",
    "hash", "instance_from_id", "inverse_lerp", "is_equal_approx", "is_finite",
    "is_inf", "is_instance_id_valid", "is_instance_valid", "is_nan", "is_same",
    "is_zero_approx", "lerp", "lerp_angle", "lerpf", "linear_to_db", "log",
    "max", "maxf", "maxi", "min", "minf", "mini", "move_toward", "nearest_po2",
    "pingpong", "posmod", "pow", "print", "print_rich", "print_verbose",
    "printerr", "printraw", "prints", "printt", "push_error", "push_warning",
    "rad_to_deg", "rand_from_seed", "randf", "randf_range", "randfn", "randi",
    "randi_range", "randomize", "remap", "rid_allocate_id", "rid_from_int64",
    "rotate_toward", "round", "roundf", "roundi", "seed", "sign", "signf",
    "signi", "sin", "sinh", "smoothstep", "snapped", "snappedf", "snappedi",
    "sqrt", "step_decimals", "str", "str_to_var", "tan", "tanh",
    "type_convert", "type_string", "typeof", "var_to_bytes",
    "var_to_bytes_with_objects", "var_to_str", "weakref", "wrap", "wrapf",
    "wrapi",
)

GDSCRIPT_RULES = (
    Rule("doc-comment", r"##.*", Comment.Special),
    Rule("comment", r"#.*", Comment.Single),
    Rule(
        "string",
        r'@?(?:("|\')(?:(?!\1)[^\n\\]|\\[\s\S])*\1(?!"|\')|"""(?:[^\\]|\\[\s\S])*?""")',
        String,
    ),
    # class_name Foo / extends Bar / as Node / var x: int / -> Item
    Rule(
        "class-name",
        r"(^(?:class|class_name|extends)[ \t]+|\bas[ \t]+"
        r"|(?:\b(?:const|var)[ \t]|[,(])[ \t]*\w+[ \t]*:[ \t]*|->[ \t]*)([a-zA-Z_]\w*)",
        Name.Class,
        lookbehind=True,
    ),
    Rule("function-definition", r"(\bfunc\s+)([a-zA-Z_]\w*\b)", Name.Function, lookbehind=True),
    Rule(
        "keyword",
        words(
            (
                "class", "class_name", "extends", "is", "in", "as", "self", "signal",
                "func", "static", "const", "enum", "var", "breakpoint", "preload",
                "await", "yield", "assert", "and", "or", "not", "null",
            ),
            prefix=r"\b",
            suffix=r"\b",
        ),
        Keyword,
    ),
    Rule(
        "control-flow",
        words(
            ("if", "elif", "else", "for", "while", "match", "break", "continue", "pass", "return"),
            prefix=r"\b",
            suffix=r"\b",
        ),
        Keyword.Reserved,
    ),
    Rule("global-function", words(GDSCRIPT_GLOBAL_FUNCTIONS, prefix=r"\b", suffix=r"\b"), Name.Builtin),
    Rule("function-call", r"\b[a-zA-Z_]\w*(?=[ \t]*\()", Name.Function),
    Rule("node-reference", r"[$%]\w+", Name.Variable.Instance),
    Rule("node-path", r"\^\w+", Name.Variable.Global),
    Rule("string-name", r"&\w+", String.Symbol),
    Rule(
        "number",
        r"\b0b[01_]+\b|\b0x[\da-fA-F_]+\b"
        r"|(?:\b\d[\d_]*(?:\.[\d_]*)?|\B\.[\d_]+)(?:e[+-]?[\d_]+)?\b",
        Number,
    ),
    Rule("number", r"\b(?:INF|NAN|PI|TAU)\b", Number),
    Rule("boolean", r"\b(?:false|true)\b", Keyword.Constant),
    Rule("operator", r"->|:=|&&|\|\||<<|>>|[-+*/%&|!<>=]=?|[~^]", Operator),
    Rule("annotation", r"@[a-zA-Z_]+\b", Name.Decorator),
    Rule("member-access", r"\.[a-zA-Z_]\w*\b", Name.Attribute),
    Rule("punctuation", r"[.:,;()[\]{}]", Punctuation),
)

GDSHADER_KEYWORDS = (
    "shader_type", "render_mode", "uniform", "varying", "const", "struct",
    "in", "out", "inout", "flat", "smooth", "lowp", "mediump", "highp",
    "instance", "global", "group_uniforms", "if", "else", "for", "while", "do",
    "switch", "case", "default", "break", "continue", "return", "discard",
    "true", "false", "void", "bool", "bvec2", "bvec3", "bvec4", "int", "ivec2",
    "ivec3", "ivec4", "uint", "uvec2", "uvec3", "uvec4", "float", "vec2",
    "vec3", "vec4", "mat2", "mat3", "mat4", "sampler2D", "isampler2D",
    "usampler2D", "sampler2DArray", "isampler2DArray", "usampler2DArray",
    "sampler3D", "isampler3D", "usampler3D", "samplerCube", "samplerCubeArray",
    "source_color", "hint_range", "hint_normal", "hint_default_white",
    "hint_default_black", "hint_default_transparent", "hint_anisotropy",
    "hint_screen_texture", "hint_depth_texture", "hint_normal_roughness_texture",
    "filter_nearest", "filter_linear", "filter_nearest_mipmap",
    "filter_linear_mipmap", "repeat_enable", "repeat_disable",
)

GDSHADER_RULES = (
    Rule("doc-comment", r"/\*\*[\s\S]*?\*/", Comment.Special),
    Rule("comment", r"//.*|/\*[\s\S]*?\*/", Comment),
    Rule("string", r'"(?:[^"\\\n]|\\.)*"', String.Double),
    Rule("keyword", words(GDSHADER_KEYWORDS, prefix=r"\b", suffix=r"\b"), Keyword),
    Rule("keyword", r"#(?:include|define|undef|ifdef|ifndef|if|elif|else|endif|error|pragma)\b", Keyword),
    Rule(
        "number",
        r"\b0x[\da-fA-F]+u?\b|(?:\b\d+\.\d*|\.\d+)(?:[eE][+-]?\d+)?f?|\b\d+(?:[eE][+-]?\d+)?[uf]?\b",
        Number,
    ),
    Rule("operator", r"<<=|>>=|&&|\|\||\+\+|--|<<|>>|[-+*/%&|^!<>=]=?|[~?]", Operator),
    Rule("punctuation", r"[.:,;()[\]{}]", Punctuation),
)


def compile_rules(rules: tuple[Rule, ...]) -> list:
    compiled: list = [(r"\s+", Whitespace)]
    for rule in rules:
        action = bygroups(using(this), rule.token) if rule.lookbehind else rule.token
        compiled.append((rule.pattern, action))
    compiled.append((r"[a-zA-Z_]\w*", Name))
    compiled.append((r".", Text))
    return compiled


def categories(rules: tuple[Rule, ...]) -> list[str]:
    seen: list[str] = []
    for rule in rules:
        if rule.category not in seen:
            seen.append(rule.category)
    return seen


class GDScriptLexer(RegexLexer):
    """Lexer for GDScript, the Godot engine scripting language."""

    name = "GDScript"
    aliases = ["gdscript", "gd"]
    filenames = ["*.gd"]
    mimetypes = ["text/x-gdscript"]

    tokens = {"root": compile_rules(GDSCRIPT_RULES)}


class GDShaderLexer(RegexLexer):
    """Lexer for the Godot shading language."""

    name = "Godot Shader"
    aliases = ["gdshader", "gdshaderinc"]
    filenames = ["*.gdshader", "*.gdshaderinc"]
    mimetypes = ["text/x-gdshader"]

    tokens = {"root": compile_rules(GDSHADER_RULES)}


LEXERS = {alias: lexer for lexer in (GDScriptLexer, GDShaderLexer) for alias in lexer.aliases}


def get_lexer(name: str, **options):
    lexer = LEXERS.get(name.lower())
    if lexer is not None:
        return lexer(**options)
    return get_lexer_by_name(name, **options)
