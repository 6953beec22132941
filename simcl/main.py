import argparse
import glob
import logging
import os
import sys

from simcl.ast_nodes import Program
from simcl.errors import ParserError
from simcl.lexer import Lexer
from simcl.log_formatter import LogFormatter
from simcl.parser import Parser
from simcl.semantic_analyzer import SemanticAnalyzer


def setup_logging(debug_mode=False):
    """Configure logging with custom formatter."""
    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG if debug_mode else logging.INFO)

    if any(isinstance(h.formatter, LogFormatter) for h in root_logger.handlers):
        return

    console_handler = logging.StreamHandler()
    log_formatter = LogFormatter(console_handler.stream)
    console_handler.setFormatter(log_formatter)
    root_logger.addHandler(console_handler)


def compile_source(
    source: str, filename: str = "<input>"
) -> tuple[Program, SemanticAnalyzer]:
    """Run lexer, parser and semantic pass over one compilation unit.

    Every call builds its own lexer, parser and scope chain. ParserError
    propagates to the caller.
    """
    lexer = Lexer(source)
    parser_instance = Parser(lexer, filename)
    ast = parser_instance.parse()
    logging.debug("ast:\n%s", ast)

    analyzer = SemanticAnalyzer(ast, filename)
    analyzer.analyze()
    return ast, analyzer


def compile_file(file_path, dump_tokens=False, dump_ast=False, dump_symbols=False):
    """Compile a single SimCL file. Returns True on success."""
    logging.info(f"Starting compilation of {file_path}...")

    try:
        with open(file_path, "r", encoding="utf-8") as f:
            file_content = f.read()
    except FileNotFoundError:
        logging.error(f"File not found: {file_path}")
        return False
    except OSError as e:
        logging.error(f"Error reading file {file_path}: {e}")
        return False

    if dump_tokens:
        for token in Lexer(file_content).tokenize():
            print(token)

    try:
        ast, analyzer = compile_source(file_content, os.path.relpath(file_path))
    except ParserError:
        # already logged with source context by the parser
        logging.error(f"Parsing of {file_path} failed")
        return False

    if dump_ast:
        print(ast.tree())

    if dump_symbols and analyzer.program_scope is not None:
        for symbol in analyzer.program_scope:
            print(f"{symbol.name}: {symbol.type.value} (line {symbol.line})")

    logging.info("Compilation successful!")
    return True


def main(argv=None):
    """Main entry point for the SimCL front end."""
    parser = argparse.ArgumentParser(description="SimCL compiler front end")

    parser.add_argument("-d", "--debug", action="store_true", help="Debug mode")
    parser.add_argument("--tokens", action="store_true", help="Print the token stream")
    parser.add_argument("--ast", action="store_true", help="Print the syntax tree")
    parser.add_argument(
        "--symbols", action="store_true", help="Print top-level symbol bindings"
    )
    parser.add_argument("file", nargs="?", help="Input file")
    parser.add_argument("--dir", help="Compile all .simcl files in directory")

    args = parser.parse_args(argv)

    # Configure logging
    setup_logging(args.debug)

    if args.debug:
        logging.debug(args)

    if not args.file and not args.dir:
        logging.error("No input file or directory specified")
        sys.exit(1)

    if args.file and args.dir:
        logging.warning("Both file and directory specified, will compile both")

    failed = 0

    if args.file:
        if not compile_file(args.file, args.tokens, args.ast, args.symbols):
            failed += 1

    if args.dir:
        if not os.path.isdir(args.dir):
            logging.error(f"Directory not found: {args.dir}")
            sys.exit(1)

        logging.info(f"Compiling all .simcl files in {args.dir}")
        simcl_files = sorted(glob.glob(os.path.join(args.dir, "*.simcl")))

        if not simcl_files:
            logging.warning(f"No .simcl files found in {args.dir}")

        successful = 0
        dir_failed = 0

        for file_path in simcl_files:
            if compile_file(file_path, args.tokens, args.ast, args.symbols):
                successful += 1
            else:
                dir_failed += 1

        logging.info(
            f"Directory compilation complete: {successful} successful, {dir_failed} failed"
        )
        failed += dir_failed

    if failed:
        sys.exit(1)


if __name__ == "__main__":
    main()
