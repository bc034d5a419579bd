"""
Rust rendering backend.

Renders serde models, one endpoint module per tag, and the endpoint
module index from the IR.
"""

from __future__ import annotations

import re
from typing import Any

import jinja2

from ...utils import camelize
from ..analyzer.ir_nodes import IR, ModelDescriptor, ModelFlag, OperationDescriptor, PropertyDescriptor
from .base import RenderBackend

_PATH_PARAM = re.compile(r"\{([^}]+)\}")


class RustBackend(RenderBackend):
    """Rust rendering backend."""

    TEMPLATE_LANG = "rust"
    COMMENT_PREFIX = "//"

    def _register_filters(self, env: jinja2.Environment) -> None:
        env.filters["camelize"] = camelize
        env.filters["doc"] = self._doc
        env.filters["field_type"] = self._field_type
        env.filters["rust_string"] = self._rust_string

    def generate(self, ir: IR) -> dict[str, str]:
        """Render models.rs, one module per tag and the endpoint index."""
        header = self.format_comment(ir.generation_comment) if self.config.add_generation_comment else ""

        files = {
            "src/models.rs": self.jinja_env.get_template("models.rs.jinja2").render(
                ir=ir,
                header=header,
                models=[self._model_context(model) for model in ir.models.values()],
            )
        }

        for tag in ir.tags:
            files[f"src/endpoints/{tag.base_name}.rs"] = self.jinja_env.get_template("endpoint.rs.jinja2").render(
                ir=ir,
                header=header,
                tag=tag,
                struct_name=camelize(tag.class_name),
                operations=[self._operation_context(camelize(tag.class_name), op) for op in tag.operations],
            )

        path_sets: dict[str, str] = {}
        for tag in ir.tags:
            for op in tag.operations:
                path_sets.setdefault(op.metadata["PATH_ID"], op.metadata["pathRegEx"])

        files["src/endpoints/mod.rs"] = self.jinja_env.get_template("mod.rs.jinja2").render(
            ir=ir,
            header=header,
            tags=ir.tags,
            path_sets=sorted(path_sets.items()),
            impl_per_page=any(op.metadata.get("x-codegen-impl-per-page") for ops in ir.operations.values() for op in ops),
        )
        return files

    def _model_context(self, model: ModelDescriptor) -> dict[str, Any]:
        if ModelFlag.MAP_LIKE in model.flags:
            kind = "map_like"
        elif ModelFlag.OBJECT in model.flags:
            kind = "struct"
        elif ModelFlag.ENUM in model.flags:
            kind = "enum"
        elif ModelFlag.UNION in model.flags:
            kind = "union"
        else:
            kind = "alias"
        return {"kind": kind, "model": model}

    def _operation_context(self, struct_name: str, op: OperationDescriptor) -> dict[str, Any]:
        success = next(
            (r for r in op.responses if r.code.startswith("2") and r.type is not None),
            None,
        )
        errors = [r for r in op.responses if not r.code.startswith("2") and r.code != "default"]
        uri_args = [self._path_arg(op, name) for name in _PATH_PARAM.findall(op.path)]
        return {
            "op": op,
            "error_name": f"{struct_name}{op.nickname}Error",
            "params_name": f"{struct_name}{op.nickname}Params",
            "success_type": success.type.name if success else "()",
            "errors": errors,
            "uri_format": _PATH_PARAM.sub("{}", op.path),
            "uri_args": uri_args,
        }

    @staticmethod
    def _path_arg(op: OperationDescriptor, base_name: str) -> str:
        for param in op.path_params:
            if param.base_name == base_name:
                return param.name
        return base_name

    @staticmethod
    def _field_type(prop: PropertyDescriptor) -> str:
        if prop.required:
            return prop.type.name
        return f"Option<{prop.type.name}>"

    @staticmethod
    def _doc(text: str | None, indent: int = 0) -> str:
        """Render text as /// doc comment lines."""
        if not text:
            return ""
        pad = " " * indent
        return "\n".join(f"{pad}/// {line}".rstrip() for line in text.splitlines())

    @staticmethod
    def _rust_string(value: Any) -> str:
        return str(value).replace("\\", "\\\\").replace('"', '\\"')
