from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, Field


class ModelConfig(BaseModel):
    provider: str = "claude"
    name: str = "claude-sonnet-4-20250514"
    api_key: Optional[str] = None
    base_url: Optional[str] = None
    timeout_sec: int = Field(120, gt=0, description="评审请求的超时时间（秒）")
    max_tokens: int = 8192
    parameters: Dict[str, Any] = Field(default_factory=dict)


class ContextConfig(BaseModel):
    max_changed_files: int = Field(10, ge=0, description="载荷中最多包含的变更文件数")
    max_related_files: int = Field(5, ge=0, description="最多加载的关联文件数")
    readme_max_chars: int = Field(5000, ge=0, description="README 摘录的最大字符数")
    related_file_max_chars: int = Field(100_000, gt=0, description="关联文件的大小上限（字符）")
    file_max_bytes: int = Field(1024 * 1024, gt=0, description="单个变更文件的读取上限（字节）")
    diff_max_bytes: int = Field(10 * 1024 * 1024, gt=0, description="diff 的读取上限（字节）")
    recent_commits: int = Field(5, gt=0, description="最近提交日志的条数")
    readme_candidates: List[str] = Field(default_factory=lambda: ["README.md", "README.txt", "README"])
    import_extensions: List[str] = Field(default_factory=lambda: ["", ".js", ".ts", ".jsx", ".tsx", ".rb"])
    import_matchers: List[str] = Field(default_factory=lambda: ["require", "import_from", "dynamic_import"])
    on_diff_too_large: Literal["abort", "metadata_only"] = "abort"


class FormatterConfig(BaseModel):
    prompt_template: str = "review_prompt.j2"
    report_template: str = "report.md.j2"
    template_dir: Optional[str] = None


class ReportConfig(BaseModel):
    directory: str = Field("~/.code-reviews", description="评审报告的输出目录")


class Config(BaseModel):
    model: ModelConfig = Field(default_factory=ModelConfig, description="LLM 模型相关配置")
    context: ContextConfig = Field(default_factory=ContextConfig, description="上下文组装的限制")
    formatter: FormatterConfig = Field(default_factory=FormatterConfig, description="模板相关配置")
    report: ReportConfig = Field(default_factory=ReportConfig, description="报告输出相关配置")
