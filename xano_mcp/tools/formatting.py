"""
展示层辅助函数

全部是纯函数：不访问网络、不依赖配置，输入固定则输出固定
"""
import json
import logging
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Mapping, Optional

logger = logging.getLogger(__name__)

HTTP_METHODS = ("get", "post", "put", "delete", "patch")

# 固定的通用响应码表
COMMON_RESPONSES = (
    ("200", "Success!"),
    ("400", "Input Error"),
    ("401", "Unauthorized"),
    ("403", "Access Denied"),
    ("404", "Not Found"),
    ("429", "Rate Limited"),
    ("500", "Server Error"),
)


def format_timestamp(value: Any) -> str:
    """
    把 Xano 的时间字段转换为可读字符串

    Xano 返回毫秒级 epoch 整数，旧接口可能返回 ISO 字符串；
    无法识别时原样返回，缺失时返回 N/A
    """
    if value is None or value == "":
        return "N/A"

    if isinstance(value, (int, float)) and not isinstance(value, bool):
        try:
            moment = datetime.fromtimestamp(value / 1000, tz=timezone.utc)
        except (OverflowError, ValueError, OSError):
            return str(value)
        return moment.strftime("%Y-%m-%d %H:%M:%S UTC")

    if isinstance(value, str):
        try:
            moment = datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            return value
        if moment.tzinfo is not None:
            moment = moment.astimezone(timezone.utc)
            return moment.strftime("%Y-%m-%d %H:%M:%S UTC")
        return moment.strftime("%Y-%m-%d %H:%M:%S")

    return str(value)


def json_block(value: Any) -> str:
    """缩进的 JSON 代码块"""
    return f"```json\n{json.dumps(value, indent=2, ensure_ascii=False)}\n```"


def field_line(label: str, value: Any, default: Optional[str] = None) -> str:
    """`**label**: value` 一行；值为空且没有默认值时返回空串"""
    if value is None or value == "" or value == []:
        if default is None:
            return ""
        value = default
    elif isinstance(value, (list, tuple)):
        value = ", ".join(str(v) for v in value)
    return f"**{label}**: {value}\n"


def time_line(label: str, value: Any) -> str:
    """时间字段一行，缺失时返回空串"""
    if value is None or value == "":
        return ""
    return f"**{label}**: {format_timestamp(value)}\n"


def yes_no(value: Any) -> str:
    return "Yes" if value else "No"


def page_line(response: Mapping[str, Any]) -> str:
    """分页信息：Page 1 (Next: 2) (Prev: 0)"""
    line = f"Page {response.get('curPage', 1)}"
    if response.get("nextPage"):
        line += f" (Next: {response['nextPage']})"
    if response.get("prevPage"):
        line += f" (Prev: {response['prevPage']})"
    return line


def items_of(response: Any) -> List[Dict[str, Any]]:
    """列表接口可能返回 {items: [...]} 或直接返回数组"""
    if isinstance(response, list):
        return response
    if isinstance(response, Mapping):
        return list(response.get("items") or [])
    return []


def render_sections(title: str, sections: Iterable[str], header: str = "") -> str:
    """# 标题 + 可选说明 + 以空行分隔的各小节"""
    body = "\n\n".join(sections)
    text = f"# {title}\n\n"
    if header:
        text += f"{header}\n\n"
    return text + body


def schema_to_markdown(table_id: str, schema: Any) -> str:
    """表结构转为 Markdown，每个字段一个小节"""
    title = f"# Schema for Table ID: {table_id}\n\n"
    if not isinstance(schema, list):
        return title + f"Error: Unexpected schema format: {json.dumps(schema, ensure_ascii=False)}"

    sections = []
    for item in schema:
        content = f"## {item.get('name')} ({item.get('type')})\n"
        content += f"**Required**: {yes_no(item.get('required'))}\n"
        content += f"**Nullable**: {yes_no(item.get('nullable'))}\n"
        content += f"**Access**: {item.get('access') or 'public'}\n"
        content += f"**Style**: {item.get('style') or 'single'}\n"
        content += field_line("Description", item.get("description"))
        if item.get("default") is not None:
            content += f"**Default**: {item['default']}\n"
        for key, label in (("config", "Config"), ("validators", "Validators"), ("children", "Children")):
            if item.get(key):
                content += f"**{label}**:\n{json_block(item[key])}\n"
        sections.append(content)
    return title + "\n\n".join(sections)


def swagger_to_markdown(swagger_spec: Mapping[str, Any], api_group_name: str) -> str:
    """
    Swagger/OpenAPI 文档压缩为简洁的 Markdown

    包括：基本信息、通用响应码、按路径排序的端点及参数表、认证方式
    """
    logger.debug(f"Converting Swagger spec to markdown for: {api_group_name}")

    info = swagger_spec.get("info") or {}
    servers = swagger_spec.get("servers") or []
    base_url = (servers[0] or {}).get("url") if servers else None

    lines = [
        f"# {api_group_name} API",
        "",
        "## API Info",
        f"- Title: {info.get('title') or api_group_name}",
        f"- Version: {info.get('version') or 'N/A'}",
        f"- Base URL: {base_url or 'https://'}",
        "",
        "## Responses",
        "| Code | Description |",
        "|------|-------------|",
    ]
    lines.extend(f"| {code} | {description} |" for code, description in COMMON_RESPONSES)
    lines.extend(["", "## Endpoints", ""])

    paths = swagger_spec.get("paths") or {}
    for path in sorted(paths):
        path_info = paths[path] or {}
        for method, operation in path_info.items():
            if method.lower() not in HTTP_METHODS:
                continue
            operation = operation or {}
            lines.append(f"### {method.upper()} {path}")
            lines.append(operation.get("summary") or "No summary")

            parameters = operation.get("parameters") or []
            if parameters:
                lines.append("| Param | In | Req | Type |")
                lines.append("|-------|----|-----|------|")
                for param in parameters:
                    param_type = (param.get("schema") or {}).get("type") or "unknown"
                    required = "Y" if param.get("required") else "N"
                    lines.append(f"| {param.get('name')} | {param.get('in')} | {required} | {param_type} |")
            lines.append("")

    security_schemes = (swagger_spec.get("components") or {}).get("securitySchemes") or {}
    if security_schemes:
        lines.append("## Auth")
        for name, scheme in security_schemes.items():
            line = f"- {name}: {scheme.get('type')}"
            if scheme.get("scheme"):
                line += f" ({scheme['scheme']})"
            lines.append(line)

    return "\n".join(lines) + "\n"
