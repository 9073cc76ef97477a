from typing import Any

from twoslash.models import CompilerOptionDeclaration

JSX_PRESERVE = 1

DEFAULT_COMPILER_OPTIONS: dict[str, Any] = {
    "strict": True,
    "module": 99,  # esnext
    "target": 99,  # esnext
    "allowJs": True,
    "skipDefaultLibCheck": True,
    "skipLibCheck": True,
    "moduleDetection": 3,  # force
}

_TARGETS = {
    "es3": 0,
    "es5": 1,
    "es6": 2,
    "es2015": 2,
    "es2016": 3,
    "es2017": 4,
    "es2018": 5,
    "es2019": 6,
    "es2020": 7,
    "es2021": 8,
    "es2022": 9,
    "es2023": 10,
    "esnext": 99,
}

_MODULES = {
    "none": 0,
    "commonjs": 1,
    "amd": 2,
    "umd": 3,
    "system": 4,
    "es6": 5,
    "es2015": 5,
    "es2020": 6,
    "es2022": 7,
    "esnext": 99,
    "node16": 100,
    "nodenext": 199,
    "preserve": 200,
}

_JSX = {
    "preserve": JSX_PRESERVE,
    "react": 2,
    "react-native": 3,
    "react-jsx": 4,
    "react-jsxdev": 5,
}

_MODULE_RESOLUTION = {
    "classic": 1,
    "node": 2,
    "node10": 2,
    "node16": 3,
    "nodenext": 99,
    "bundler": 100,
}

_MODULE_DETECTION = {"auto": 1, "legacy": 2, "force": 3}

_NEW_LINE = {"crlf": 0, "lf": 1}

_LIBS = {
    name: f"lib.{name}.d.ts"
    for name in (
        "es5",
        "es6",
        "es2015",
        "es2016",
        "es2017",
        "es2018",
        "es2019",
        "es2020",
        "es2021",
        "es2022",
        "es2023",
        "esnext",
        "dom",
        "dom.iterable",
        "webworker",
        "scripthost",
    )
}

_BOOLEAN_OPTIONS = (
    "allowJs",
    "allowSyntheticDefaultImports",
    "allowUnreachableCode",
    "allowUnusedLabels",
    "checkJs",
    "declaration",
    "declarationMap",
    "downlevelIteration",
    "emitDecoratorMetadata",
    "emitDeclarationOnly",
    "esModuleInterop",
    "exactOptionalPropertyTypes",
    "experimentalDecorators",
    "importHelpers",
    "inlineSourceMap",
    "isolatedModules",
    "noEmit",
    "noFallthroughCasesInSwitch",
    "noImplicitAny",
    "noImplicitOverride",
    "noImplicitReturns",
    "noImplicitThis",
    "noLib",
    "noUncheckedIndexedAccess",
    "noUnusedLocals",
    "noUnusedParameters",
    "preserveConstEnums",
    "removeComments",
    "resolveJsonModule",
    "skipDefaultLibCheck",
    "skipLibCheck",
    "sourceMap",
    "strict",
    "strictBindCallApply",
    "strictFunctionTypes",
    "strictNullChecks",
    "strictPropertyInitialization",
    "useDefineForClassFields",
    "verbatimModuleSyntax",
)

_STRING_OPTIONS = (
    "baseUrl",
    "declarationDir",
    "jsxFactory",
    "jsxFragmentFactory",
    "jsxImportSource",
    "outDir",
    "outFile",
    "rootDir",
)


def _declare(name: str, type_: Any, element: CompilerOptionDeclaration | None = None) -> CompilerOptionDeclaration:
    return CompilerOptionDeclaration(name=name, type=type_, element=element)


DEFAULT_OPTION_DECLARATIONS: list[CompilerOptionDeclaration] = [
    *(_declare(name, "boolean") for name in _BOOLEAN_OPTIONS),
    *(_declare(name, "string") for name in _STRING_OPTIONS),
    _declare("maxNodeModuleJsDepth", "number"),
    _declare("target", _TARGETS),
    _declare("module", _MODULES),
    _declare("jsx", _JSX),
    _declare("moduleResolution", _MODULE_RESOLUTION),
    _declare("moduleDetection", _MODULE_DETECTION),
    _declare("newLine", _NEW_LINE),
    _declare("lib", "list", _declare("lib", _LIBS)),
    _declare("types", "list", _declare("types", "string")),
    _declare("rootDirs", "list", _declare("rootDirs", "string")),
]
