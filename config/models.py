from pydantic import BaseModel, Field
from typing import List, Optional, Dict, Any

from core.colors import DEFAULT_PALETTE

class ProjectConfig(BaseModel):
    manifest: str = Field("sfdx-project.json", description="描述包目录的项目清单文件")
    skip_files: List[str] = Field(default_factory=lambda: ["sfdx-project.json"], description="不参与组件分类的文件")
    include_deleted: bool = Field(False, description="是否同时为已删除的文件构建元数据")

class ClassifierConfig(BaseModel):
    type: str = "suffix"
    options: Dict[str, Any] = Field(default_factory=dict)

class MaterializerConfig(BaseModel):
    type: str = "git"
    options: Dict[str, Any] = Field(default_factory=dict)
    baseline_ref: str = Field("main", description="处理完所有打开的 PR 后检出的基线分支")

class ColorConfig(BaseModel):
    palette: List[str] = Field(default_factory=lambda: list(DEFAULT_PALETTE), description="冲突标记使用的颜色表")

class GitHubConfig(BaseModel):
    repo: Optional[str] = None
    token_env_var: str = "GITHUB_TOKEN"
    api_url: str = "https://api.github.com"
    retention_days: int = Field(5, description="已关闭 PR 的保留天数")
    timeout_sec: int = 20
    retries: int = 3

class ReportConfig(BaseModel):
    template: str = "conflicts.md.j2"
    template_dir: Optional[str] = None


class Config(BaseModel):
    project: ProjectConfig = Field(default_factory=ProjectConfig, description="项目相关配置")
    classifier: ClassifierConfig = Field(default_factory=ClassifierConfig, description="组件分类器配置")
    materializer: MaterializerConfig = Field(default_factory=MaterializerConfig, description="工作树检出配置")
    colors: ColorConfig = Field(default_factory=ColorConfig, description="冲突颜色配置")
    github: GitHubConfig = Field(default_factory=GitHubConfig, description="GitHub API 相关配置")
    report: ReportConfig = Field(default_factory=ReportConfig, description="摘要报告相关配置")
