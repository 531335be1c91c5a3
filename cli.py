import asyncio
from pathlib import Path
from typing import Optional

import click
from rich.console import Console
from rich.markdown import Markdown
from rich.panel import Panel

from config.logic import load_and_merge_configs
from config.models import Config
from core.pipeline import CommitReviewPipeline
from utils.errors import AIReviewException
from utils.logger import DEFAULT_LOG_FILE, logger, setup_logger


def apply_cli_overrides(
    config: Config,
    provider: Optional[str] = None,
    model: Optional[str] = None,
    metadata_only: bool = False,
) -> Config:
    """将CLI选项应用于加载的配置"""
    if provider:
        config.model.provider = provider
        logger.info(f"使用 provider 覆盖配置: {provider}")
    if model:
        config.model.name = model
        logger.info(f"使用 model 覆盖配置: {model}")
    if metadata_only:
        config.context.on_diff_too_large = "metadata_only"
    return config


def _load(ctx: click.Context, repo_path: str, config_path: Optional[str]) -> Config:
    try:
        return load_and_merge_configs(custom_config_path=config_path, repo_path=Path(repo_path))
    except AIReviewException as e:
        _fail(ctx, e)


def _fail(ctx: click.Context, error: AIReviewException) -> None:
    verbose = ctx.obj.get("verbose", False)
    logger.opt(exception=verbose).debug(f"Failure details for stage '{error.stage}'")
    Console(stderr=True).print(f"[bold red]评审失败 (stage: {error.stage}):[/bold red] {error}")
    ctx.exit(1)


@click.group()
@click.option(
    "-v", "--verbose",
    is_flag=True,
    help="启用详细日志记录以进行调试",
)
@click.pass_context
def cli(ctx, verbose: bool):
    """
    AI 驱动的 Git 提交评审工具。
    """
    setup_logger(log_level="DEBUG" if verbose else "INFO", log_file=DEFAULT_LOG_FILE)
    ctx.obj = {"verbose": verbose}


@cli.command("review")
@click.argument("repo_path", type=click.Path(exists=True, file_okay=False))
@click.argument("commit", default="HEAD")
@click.option(
    "-c", "--config",
    "config_path",
    type=click.Path(exists=True, dir_okay=False),
    help="自定义配置文件的路径",
)
@click.option("--provider", type=str, help="覆盖 LLM provider (例如 'openai')")
@click.option("--model", type=str, help="覆盖 LLM 模型名称")
@click.option(
    "--metadata-only",
    is_flag=True,
    default=False,
    help="diff 超出大小限制时仅使用提交元数据继续评审",
)
@click.option(
    "--dry-run",
    is_flag=True,
    default=False,
    help="只打印将发送给模型的提示词，不调用模型",
)
@click.pass_context
def review(ctx, repo_path: str, commit: str, config_path: str, provider: str, model: str, metadata_only: bool, dry_run: bool):
    """
    评审 REPO_PATH 中的 COMMIT (默认 HEAD)，并写入 Markdown 报告。
    """
    console = Console()
    config = apply_cli_overrides(_load(ctx, repo_path, config_path), provider, model, metadata_only)
    pipeline = CommitReviewPipeline(config)

    try:
        with console.status(f"[bold green]正在评审 {commit}...[/bold green]"):
            result = asyncio.run(pipeline.review(repo_path, commit, dry_run=dry_run))
    except AIReviewException as e:
        _fail(ctx, e)
        return

    if dry_run:
        console.print(result.prompt, markup=False, highlight=False)
        return

    console.print(Panel(
        Markdown(result.review or ""),
        title=f"[bold cyan]{result.payload.repository}@{result.payload.metadata.commit[:8]}[/bold cyan]",
        border_style="cyan",
    ))
    console.print(f"\n[bold green]✅ 评审完成![/bold green] 报告已保存到: {result.report_path}")


@cli.command("context")
@click.argument("repo_path", type=click.Path(exists=True, file_okay=False))
@click.argument("commit", default="HEAD")
@click.option(
    "-c", "--config",
    "config_path",
    type=click.Path(exists=True, dir_okay=False),
    help="自定义配置文件的路径",
)
@click.option("--metadata-only", is_flag=True, default=False, help="diff 过大时仍然输出上下文")
@click.pass_context
def context(ctx, repo_path: str, commit: str, config_path: str, metadata_only: bool):
    """
    以 JSON 输出将要发送给评审模型的上下文。
    """
    config = apply_cli_overrides(_load(ctx, repo_path, config_path), metadata_only=metadata_only)
    pipeline = CommitReviewPipeline(config)
    try:
        payload = asyncio.run(pipeline.build_context(repo_path, commit))
    except AIReviewException as e:
        _fail(ctx, e)
        return
    click.echo(payload.model_dump_json(indent=2))


def main():
    cli()


if __name__ == "__main__":
    main()
