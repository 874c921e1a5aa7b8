#!/usr/bin/env python3
"""
Command-line debug interface for the data chat core.
Loads a remote dataset, prints the system prompt built from it, and lets you
try chart function calls (and, with an LLM key configured, questions) by typing.
"""

import argparse
import asyncio
import json
import sys

import config
from chart_generator import CHART_FUNCTIONS, handle_chart_function
from config_validator import validate_config
from data_context import create_data_context_prompt
from data_loader import load_remote_data
from error_handler import ConfigurationError, DataLoadError
from llm_handler import DEFAULT_BASE_PROMPT, DataChatSession, create_client, infer_data_type
from logging_config import logger


class DebugCLI:
    """Command-line interface for debugging dataset prompts and charts"""

    def __init__(self, dataset, base_prompt: str = DEFAULT_BASE_PROMPT, max_rows=None):
        self.running = True
        self.dataset = dataset
        self.base_prompt = base_prompt
        self.max_rows = max_rows
        self.session = None

    def print_help(self):
        """Print help message"""
        print()
        print("🔧 Debug CLI Commands:")
        print("  .prompt                - Show the system prompt built from the dataset")
        print("  .chart <name> <json>   - Run a chart function call")
        print("                           Example: .chart create_pie_chart {\"title\": \"T\", \"labels\": [\"a\"], \"data\": [1]}")
        print("  .charts                - List the chart function names")
        print("  <question>             - Ask the LLM about the data (needs LLM_API_KEY)")
        print("  .help                  - Show this help")
        print("  .quit or .exit         - Exit the debug interface")
        print()

    def show_prompt(self):
        print(create_data_context_prompt(self.dataset, self.base_prompt, self.max_rows))

    def run_chart(self, arguments: str):
        """Parse '<name> <json>' and print the chart payload."""
        name, _, raw_args = arguments.partition(' ')
        try:
            args = json.loads(raw_args) if raw_args.strip() else {}
        except json.JSONDecodeError as e:
            print(f"❌ Invalid JSON arguments: {e}")
            return

        payload = handle_chart_function(name, args)
        print(payload.text)
        if payload.html:
            print(payload.html)

    async def ask(self, question: str):
        if self.session is None:
            try:
                client = create_client()
            except ConfigurationError as e:
                print(f"❌ {e}")
                return
            self.session = DataChatSession(self.dataset, base_prompt=self.base_prompt, max_rows=self.max_rows, client=client)

        reply = await self.session.ask(question)
        print(reply.text)
        for chart in reply.charts:
            print(chart.html)

    async def process_input(self, user_input: str):
        """Process a single line of user input"""
        user_input = user_input.strip()

        if not user_input:
            return

        if user_input in ['.quit', '.exit']:
            print("👋 Goodbye!")
            self.running = False
        elif user_input == '.help':
            self.print_help()
        elif user_input == '.prompt':
            self.show_prompt()
        elif user_input == '.charts':
            for name in CHART_FUNCTIONS:
                print(f"  {name}")
        elif user_input.startswith('.chart '):
            self.run_chart(user_input[7:].strip())
        elif user_input.startswith('.'):
            print(f"❌ Unknown command: {user_input}. Type .help for the list of commands.")
        else:
            await self.ask(user_input)

    async def run(self):
        """Main CLI loop"""
        self.show_prompt()
        self.print_help()

        while self.running:
            try:
                user_input = input("> ").strip()
            except EOFError:
                # Handle Ctrl+D
                print("\n👋 Goodbye!")
                break
            except KeyboardInterrupt:
                print("\n🛑 Interrupted. Use .quit to exit gracefully.")
                continue

            await self.process_input(user_input)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Load a remote dataset and debug its prompt and charts.")
    parser.add_argument("url", help="URL of the CSV or JSON file")
    parser.add_argument("--format", choices=["csv", "json"], default=None,
                        help="Data format, inferred from the URL when omitted")
    parser.add_argument("--max-rows", type=int, default=None,
                        help=f"Rows to include in the prompt (default: {config.default_max_rows})")
    parser.add_argument("--base-prompt", default=DEFAULT_BASE_PROMPT, help="Base system prompt")
    return parser


async def main(argv=None) -> int:
    """Main entry point"""
    args = build_parser().parse_args(argv)
    validate_config(config)

    data_type = args.format or infer_data_type(args.url)
    try:
        dataset = await load_remote_data(args.url, data_type)
    except DataLoadError as e:
        logger.error(f"Failed to load data from {args.url}: {e}")
        print(f"❌ Failed to load data: {e}")
        return 1

    cli = DebugCLI(dataset, base_prompt=args.base_prompt, max_rows=args.max_rows)
    await cli.run()
    return 0


def console_main():
    """Console script entry point"""
    try:
        sys.exit(asyncio.run(main()))
    except KeyboardInterrupt:
        print("\n👋 Goodbye!")
        sys.exit(0)


if __name__ == "__main__":
    console_main()
