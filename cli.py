import sys
from pathlib import Path
from typing import Optional

import click
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from config.logic import load_and_merge_configs
from config.models import Config
from core.contracts.models import CONFLICT_STATUSES, ChangeReport
from core.formatter.jinja_formatter import Jinja2Formatter
from core.pipeline import MetadataAugmenter
from core.report import load_report, save_report
from core.sources.github_source import GitHubChangeSource
from utils.errors import ConflictScopeException, FormatterError
from utils.logger import setup_logger, logger


def apply_cli_overrides(
    config: Config,
    baseline: Optional[str],
    classifier: Optional[str],
    materializer: Optional[str],
    no_checkout: bool,
) -> Config:
    """将CLI选项应用于加载的配置"""
    if baseline:
        config.materializer.baseline_ref = baseline
        logger.info(f"使用 baseline 覆盖配置: {baseline}")
    if classifier:
        config.classifier.type = classifier
        config.classifier.options = {}
        logger.info(f"使用 classifier 覆盖配置: {classifier}")
    if materializer:
        config.materializer.type = materializer
        config.materializer.options = {}
        logger.info(f"使用 materializer 覆盖配置: {materializer}")
    if no_checkout:
        config.materializer.type = "noop"
        config.materializer.options = {}
        logger.info("已禁用检出，直接使用当前工作树")
    return config


def render_summary(config: Config, report: ChangeReport) -> str:
    formatter = Jinja2Formatter(
        template_dir=config.report.template_dir,
        template_name=config.report.template,
    )
    return formatter.format(report)


def write_summary(config: Config, report: ChangeReport, summary_path: str) -> None:
    try:
        Path(summary_path).write_text(render_summary(config, report), encoding="utf-8")
    except OSError as e:
        raise FormatterError(f"Could not write summary to {summary_path}: {e}") from e
    logger.info(f"Summary written to {summary_path}")


def conflict_table(report: ChangeReport) -> Table:
    table = Table(show_header=True, header_style="bold cyan")
    table.add_column("PR")
    table.add_column("状态")
    table.add_column("包")
    table.add_column("冲突组件", justify="right")
    for change_id, change in report.all_changes().items():
        conflicting = sum(
            1
            for buckets in change.metadata.values()
            for status in CONFLICT_STATUSES
            for component in buckets.bucket(status)
            if component.conflicts
        )
        table.add_row(f"#{change_id}", change.state, str(len(change.metadata)), str(conflicting))
    return table


@click.group()
@click.option(
    "-v", "--verbose",
    is_flag=True,
    help="启用详细日志记录以进行调试",
)
@click.pass_context
def cli(ctx, verbose: bool):
    """
    PR 元数据增强与冲突检测工具。
    """
    setup_logger(log_level="DEBUG" if verbose else "INFO")
    ctx.obj = {'verbose': verbose}


@cli.command("augment")
@click.argument("report_path", type=click.Path(exists=True, dir_okay=False))
@click.option("-o", "--output", "output_path", type=click.Path(dir_okay=False), help="输出文件路径（默认覆盖输入文件）")
@click.option(
    "-c", "--config",
    "config_path",
    type=click.Path(exists=True, dir_okay=False),
    help="自定义配置文件的路径",
)
@click.option("--baseline", type=str, help="覆盖基线分支 (例如 'main')")
@click.option("--classifier", type=str, help="覆盖组件分类器 (例如 'suffix')")
@click.option("--materializer", type=str, help="覆盖工作树检出方式 (例如 'git')")
@click.option("--no-checkout", is_flag=True, default=False, help="不检出任何分支，直接使用当前工作树")
@click.option("--summary", "summary_path", type=click.Path(dir_okay=False), help="同时写出 Markdown 冲突摘要")
@click.pass_context
def augment(ctx, report_path: str, output_path: str, config_path: str, baseline: str, classifier: str,
            materializer: str, no_checkout: bool, summary_path: str):
    """
    为 PR 报告添加包/组件元数据并检测冲突。
    """
    console = Console()
    verbose = ctx.obj.get('verbose', False)

    try:
        config = load_and_merge_configs(custom_config_path=config_path)
        config = apply_cli_overrides(config, baseline, classifier, materializer, no_checkout)

        with console.status("[bold green]正在分析 PR 元数据...[/bold green]"):
            pipeline = MetadataAugmenter(config)
            report = pipeline.run(report_path, output_path)

        if summary_path:
            write_summary(config, report, summary_path)

        console.print(Panel(
            conflict_table(report),
            title="[bold cyan]冲突检测结果[/bold cyan]",
            border_style="cyan",
            expand=False,
        ))
        console.print(f"\n[bold green]✅ 结果已写入 {output_path or report_path}[/bold green]")

    except ConflictScopeException as e:
        logger.error(f"发生已知错误: {e}", exc_info=verbose)
        console.print(f"[bold red]错误:[/bold red] {e}")
        sys.exit(1)


@cli.command("fetch")
@click.argument("repo", type=str)
@click.argument("output_path", type=click.Path(dir_okay=False))
@click.option(
    "-c", "--config",
    "config_path",
    type=click.Path(exists=True, dir_okay=False),
    help="自定义配置文件的路径",
)
@click.pass_context
def fetch(ctx, repo: str, output_path: str, config_path: str):
    """
    从 GitHub 拉取打开的和近期关闭的 PR，生成报告文件 (REPO 形如 owner/name)。
    """
    console = Console()
    verbose = ctx.obj.get('verbose', False)

    try:
        config = load_and_merge_configs(custom_config_path=config_path)
        config.github.repo = repo

        with console.status(f"[bold green]正在读取 {repo} 的 PR...[/bold green]"):
            report = GitHubChangeSource(config.github).fetch()
            save_report(report, output_path)

        console.print(
            f"[bold green]✅ 已写入 {len(report.open_prs)} 个打开的 PR 和 "
            f"{len(report.closed_prs)} 个已关闭的 PR 到 {output_path}[/bold green]"
        )

    except ConflictScopeException as e:
        logger.error(f"发生已知错误: {e}", exc_info=verbose)
        console.print(f"[bold red]错误:[/bold red] {e}")
        sys.exit(1)


@cli.command("summary")
@click.argument("report_path", type=click.Path(exists=True, dir_okay=False))
@click.option("-o", "--output", "output_path", type=click.Path(dir_okay=False), help="写入文件而不是打印")
@click.option(
    "-c", "--config",
    "config_path",
    type=click.Path(exists=True, dir_okay=False),
    help="自定义配置文件的路径",
)
@click.pass_context
def summary(ctx, report_path: str, output_path: str, config_path: str):
    """
    渲染已增强报告的 Markdown 冲突摘要。
    """
    console = Console()
    verbose = ctx.obj.get('verbose', False)

    try:
        config = load_and_merge_configs(custom_config_path=config_path)
        report = load_report(report_path)
        if output_path:
            write_summary(config, report, output_path)
            console.print(f"[bold green]✅ 摘要已写入 {output_path}[/bold green]")
        else:
            click.echo(render_summary(config, report))

    except ConflictScopeException as e:
        logger.error(f"发生已知错误: {e}", exc_info=verbose)
        console.print(f"[bold red]错误:[/bold red] {e}")
        sys.exit(1)


if __name__ == "__main__":
    cli()
