"""
md2pptx - Convert markdown lesson documents to PowerPoint presentations.

Usage:
    md2pptx <input.md> [output.pptx] [--base-dir DIR] [--config FILE]
    md2pptx --template > lesson.md

If output path is not specified, uses the input filename with .pptx extension.
The style configuration defaults to ``config.json`` in the base directory,
which itself defaults to the directory of the input file.
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Optional

from md2pptx.archive import STRATEGIES
from md2pptx.compiler import compile_deck
from md2pptx.config import load_config
from md2pptx.errors import Md2PptxError

MARKDOWN_TEMPLATE = """---
discipline: Programming Fundamentals
type: lecture
module: 2
lesson: "2.3: Working with Collections"
---

## [plan] Lesson plan
- Lists and tuples
- Dictionaries
- Comprehensions
  - Filtering
  - Nested comprehensions

## [divider] Section 1: Lists and tuples

## [content] Lists
A **list** is an ordered, mutable sequence.
- Created with `[]` or `list()`
- Indexed from `0`
  - Negative indexes count from the end

## [code] Appending items
```python
numbers = [1, 2, 3]
numbers.append(4)
print(numbers)
```

## [content] Lists vs tuples
| Feature | list | tuple |
|---------|------|-------|
| Mutable | yes | no |
| Syntax | `[]` | `()` |

## [divider] Section 2: Dictionaries

## [content] Summary
- Pick the collection that matches how the data changes
- Prefer comprehensions over manual loops
"""


def main(argv: Optional[list[str]] = None) -> int:
    parser = argparse.ArgumentParser(
        description="Convert markdown lesson documents to PowerPoint presentations."
    )
    parser.add_argument("input", nargs="?", help="Input markdown file path")
    parser.add_argument(
        "output", nargs="?", help="Output PPTX file path (default: same name as input)"
    )
    parser.add_argument(
        "--base-dir",
        help="Directory holding config.json and the logo (default: input file directory)",
    )
    parser.add_argument("--config", help="Style configuration file (JSON or YAML)")
    parser.add_argument(
        "--strategy",
        choices=STRATEGIES,
        default="substring",
        help="How media references are rewritten inside the package",
    )
    parser.add_argument(
        "--template", action="store_true", help="Print an example lesson document and exit"
    )

    args = parser.parse_args(argv)

    if args.template:
        print(MARKDOWN_TEMPLATE, end="")
        return 0
    if not args.input:
        parser.error("the following arguments are required: input")

    input_path = Path(args.input)
    if not input_path.exists():
        print(f"Error: Input file not found: {input_path}", file=sys.stderr)
        return 1

    output_path = Path(args.output) if args.output else input_path.with_suffix(".pptx")
    base_dir = Path(args.base_dir) if args.base_dir else input_path.resolve().parent

    print(f"Converting: {input_path}")
    print(f"Output: {output_path}")

    try:
        config = load_config(base_dir, Path(args.config) if args.config else None)
        result = compile_deck(
            input_path.read_text(encoding="utf-8"),
            output_path,
            base_dir,
            config=config,
            strategy=args.strategy,
        )
    except Md2PptxError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    if result.warnings:
        print(f"\nWarnings ({len(result.warnings)}):", file=sys.stderr)
        for w in result.warnings:
            print(f"  - {w}", file=sys.stderr)

    print(f"Done! Created {result.output_path} ({result.num_slides} slides)")
    return 0


if __name__ == "__main__":
    sys.exit(main())
