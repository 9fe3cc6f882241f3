import argparse
import json
import sys
from pathlib import Path


def _add_backend_to_path() -> None:
    repo_root = Path(__file__).resolve().parents[1]
    backend_root = repo_root / "backend"
    if str(backend_root) not in sys.path:
        sys.path.insert(0, str(backend_root))


def main() -> int:
    parser = argparse.ArgumentParser(
        description="Run SHCarrier.exe on a data file and report its output files."
    )
    parser.add_argument(
        "input",
        nargs="?",
        default="",
        help="输入文件（csv/tsv）；留空则弹出文件选择对话框",
    )
    parser.add_argument("--area", action="store_true", help="追加 -Area")
    parser.add_argument("--std", default="STD", help="标准品名称（默认：STD，即不指定）")
    parser.add_argument("--gbk", action="store_true", help="追加 -GBK")
    parser.add_argument("--dev", action="store_true", help="追加 -dev")
    parser.add_argument("--timeout", type=float, default=None, help="超时秒数")
    parser.add_argument(
        "--config",
        default="",
        help="运行期配置YAML（默认：config/shcarrier_runtime.yaml）",
    )
    parser.add_argument("--open", action="store_true", help="成功后用默认程序打开汇总文件")
    parser.add_argument("--json", action="store_true", help="以JSON输出最终结果")
    args = parser.parse_args()

    _add_backend_to_path()
    from shcarrier.app import ShellCore  # type: ignore
    from shcarrier.config import configure_logging, get_config, reload_config  # type: ignore
    from shcarrier.models import ProcessingOptions  # type: ignore

    config = reload_config(args.config) if args.config else get_config()
    configure_logging(config.logging)
    core = ShellCore(config)

    input_path = args.input
    if not input_path:
        selection = core.select_input_file()
        if selection.rejected_path is not None:
            print(f"不支持的文件类型: {selection.rejected_path}")
            return 2
        if selection.canceled:
            print("已取消")
            return 1
        input_path = str(selection.file_path)

    options = ProcessingOptions(
        use_area=args.area,
        std_name=args.std,
        use_gbk=args.gbk,
        dev_mode=args.dev,
    )
    result = core.process_file(
        input_path,
        options,
        timeout=args.timeout,
        on_progress=lambda chunk: print(chunk.text, end="", flush=True),
        on_error=lambda chunk: print(chunk.text, end="", file=sys.stderr, flush=True),
    )

    if args.json:
        print(json.dumps(result.to_payload(), ensure_ascii=False, indent=2))
    elif result.success:
        print(f"\n处理完成: exit={result.exit_code}")
        print(f"  汇总文件: {result.output_files.summary or '未生成'}")
        print(f"  计算文件: {result.output_files.calculation or '未生成'}")
    else:
        print(f"\n处理失败: {result.error_kind.value} exit={result.exit_code}")
        if result.error:
            print(f"  {result.error}")

    if args.open and result.success and result.output_files.summary:
        core.open_artifact(result.output_files.summary)

    return 0 if result.success else 1


if __name__ == "__main__":
    raise SystemExit(main())
