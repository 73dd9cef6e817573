import argparse
import asyncio
import os
import sys

from components.console import log, set_verbose, warn
from components.errors import HostError
from components.host import FileSystemStore
from components.runtime.config import SETTINGS_FILE, Settings, load_settings, save_settings
from engine import ComponentEngine

EXAMPLE_COMPONENTS = """---
defines-components: true
---

# Components

```py:component:Greeting
name = props.get("name", "world")
<span class="greeting">Hello {name}!</span>
```
"""

EXAMPLE_NOTE = """# Example

`py: <Greeting name="notecomp" />`

```py:
items = ["one", "two", "three"]
<ul>{[<li>{item}</li> for item in items]}</ul>
```
"""


def make_engine(root, settings_path=None):
    settings = load_settings(settings_path)
    return ComponentEngine(FileSystemStore(root), settings=settings)


async def check(root, settings_path=None):
    """Compile every component under `root`. Returns the number of failures."""
    engine = make_engine(root, settings_path)
    try:
        await engine.load_components()
        failures = 0
        for namespace, name, compiled in engine.registry.components():
            if compiled.is_failed():
                failures += 1
                warn(f"{namespace}.{name}:\n{compiled.error}")
            else:
                log(f"{namespace}.{name} ok")
        return failures
    finally:
        engine.close()


async def render(root, doc_id, settings_path=None):
    engine = make_engine(root, settings_path)
    try:
        await engine.load_components()
        return await engine.render_document(doc_id)
    finally:
        engine.close()


def cmd_check(args):
    try:
        failures = asyncio.run(check(args.root, args.settings))
    except HostError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)
    if failures:
        print(f"Error: {failures} component(s) failed to compile", file=sys.stderr)
        sys.exit(1)


def cmd_render(args):
    try:
        html = asyncio.run(render(args.root, args.document, args.settings))
    except HostError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)
    print(html)


def cmd_init(args):
    log("Initializing project...")
    if not os.path.exists(SETTINGS_FILE):
        save_settings(Settings(), SETTINGS_FILE)
    with open("components.md", "w") as f:
        f.write(EXAMPLE_COMPONENTS)
    with open("example.md", "w") as f:
        f.write(EXAMPLE_NOTE)
    log(f"Created {SETTINGS_FILE}, components.md and example.md")


def main():
    parser = argparse.ArgumentParser(description="notecomp CLI")
    parser.add_argument("--verbose", action="store_true", help="Enable verbose output (sent to stderr)")
    parser.add_argument("--settings", help=f"Settings file (default: {SETTINGS_FILE} or ~/.notecomp/settings.json)")
    subparsers = parser.add_subparsers(dest="command")

    check_parser = subparsers.add_parser("check", help="Compile every component and report failures")
    check_parser.add_argument("root", nargs="?", default=".", help="Documents folder (default: .)")

    render_parser = subparsers.add_parser("render", help="Render the inline snippets of a document as HTML")
    render_parser.add_argument("document", help="Document path relative to --root")
    render_parser.add_argument("--root", default=".", help="Documents folder (default: .)")

    subparsers.add_parser("init", help="Init project")

    args = parser.parse_args()
    set_verbose(args.verbose)

    if args.command == "check": cmd_check(args)
    elif args.command == "render": cmd_render(args)
    elif args.command == "init": cmd_init(args)
    else: parser.print_help()


if __name__ == "__main__":
    main()
