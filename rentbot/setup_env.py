"""
Interactive configuration wizard.

Writes a ``.env`` file with the Supabase, Groq and WhatsApp settings the bot
needs and creates a ``.gitignore`` that keeps credentials and receipts out of
version control.
"""
import argparse
import sys
from pathlib import Path
from typing import Callable, Dict, List, Optional, Tuple

# (env var, prompt) grouped by section heading and help text
SECTIONS: List[Tuple[str, str, List[Tuple[str, str]]]] = [
    (
        "📊 Supabase Configuration",
        "Get these from: https://app.supabase.com/project/_/settings/api",
        [("SUPABASE_URL", "Supabase URL"), ("SUPABASE_KEY", "Supabase anon/public key")],
    ),
    (
        "🤖 Groq AI Configuration",
        "Get your API key from: https://console.groq.com/keys",
        [("GROQ_API_KEY", "Groq API Key")],
    ),
    (
        "💬 WhatsApp Cloud API Configuration",
        "Get these from your Meta app's WhatsApp > API Setup page",
        [
            ("WHATSAPP_ACCESS_TOKEN", "Access token"),
            ("WHATSAPP_PHONE_NUMBER_ID", "Phone number ID"),
            ("WHATSAPP_VERIFY_TOKEN", "Webhook verify token (any secret string)"),
        ],
    ),
]

GITIGNORE = """# Environment variables
.env
.env.local
.env.*.local

# Python
__pycache__/
*.py[cod]
.venv/

# Temporary files
*.log
*.tmp
/tmp/

# PDF receipts
receipts/
*.pdf

# OS files
.DS_Store
Thumbs.db

# IDE
.vscode/
.idea/
*.swp
*.swo
"""


def render_env(values: Dict[str, str]) -> str:
    """Format collected values as .env content."""
    lines = []
    for heading, _, fields in SECTIONS:
        lines.append(f"# {heading.split(' ', 1)[1]}")
        for key, _ in fields:
            lines.append(f"{key}={values.get(key, '')}")
        lines.append("")
    lines.extend(["# Optional: Logging", "LOG_LEVEL=INFO", ""])
    return "\n".join(lines)


def ensure_gitignore(directory: Path) -> bool:
    """Create .gitignore when missing; returns True if one was written."""
    path = directory / ".gitignore"
    if path.exists():
        return False
    path.write_text(GITIGNORE)
    return True


def collect_values(ask: Callable[[str], str], out=sys.stdout) -> Dict[str, str]:
    values = {}
    for heading, help_text, fields in SECTIONS:
        print(f"\n{heading}", file=out)
        print(f"{help_text}\n", file=out)
        for key, prompt in fields:
            values[key] = ask(f"{prompt}: ").strip()
    return values


def main(argv: Optional[List[str]] = None, ask: Callable[[str], str] = input) -> int:
    parser = argparse.ArgumentParser(description="Create the rent bot .env configuration")
    parser.add_argument(
        "--directory",
        type=Path,
        default=Path("."),
        help="Directory to write .env and .gitignore into",
    )
    parser.add_argument(
        "--force",
        action="store_true",
        help="Overwrite an existing .env without asking",
    )
    args = parser.parse_args(argv)

    print("\n🚀 Rent Bot Setup\n")
    print("This will help you configure your .env file\n")

    env_path = args.directory / ".env"
    if env_path.exists() and not args.force:
        answer = ask("⚠️  .env file already exists. Overwrite? (y/n): ")
        if answer.strip().lower() != "y":
            print("Setup cancelled.")
            return 0

    values = collect_values(ask)
    args.directory.mkdir(parents=True, exist_ok=True)
    env_path.write_text(render_env(values))

    print("\n✅ .env file created successfully!\n")
    print("Next steps:")
    print("1. Run: pip install -e .")
    print("2. Run: playwright install chromium")
    print("3. Run: rentbot")
    print("4. Point your WhatsApp webhook at https://<your-host>/webhook/whatsapp\n")

    if ensure_gitignore(args.directory):
        print("✅ .gitignore created\n")

    return 0


def run() -> None:
    try:
        sys.exit(main())
    except (KeyboardInterrupt, EOFError):
        print("\nSetup cancelled.")
        sys.exit(1)


if __name__ == "__main__":
    run()
