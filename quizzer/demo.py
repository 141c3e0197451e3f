"""Walk-through of the prompt toolkit as a staged flow.

Run with `quizzer-demo` (or `python -m quizzer.demo`).
"""

from __future__ import annotations

import asyncio
import json
import logging
import re
import sys
from typing import Any

from .errors import QuizzerError
from .questioner import Questioner
from .stages import StageRunner

_logging = logging.getLogger(__name__)

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
PROJECT_NAME_PATTERN = re.compile(r"^[a-zA-Z0-9_-]+$")


def setup_logging(debug: bool = False) -> None:
    """Send library logs to a file so they never mix with the prompts."""
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.WARNING,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.FileHandler("quizzer-demo.log")],
    )


class DemoQuiz:
    def __init__(self, questioner: Questioner) -> None:
        self.q = questioner
        self.runner = StageRunner(self)
        self.stages = {
            "welcome": self.stage_welcome,
            "compatibility": self.stage_compatibility,
            "modern": self.stage_modern,
            "table": self.stage_table,
            "form": self.stage_form,
            "final": self.stage_final,
        }
        self.user_data: dict[str, Any] = {}

    def _print(self, *lines: str) -> None:
        print("\n".join(lines))

    async def run(self) -> None:
        s = self.q.styling
        self._print(s.gradient("Welcome to quizzer!", ["#ff6b6b", "#4ecdc4", "#45b7d1"]), "")
        await self.runner.start()

    async def stage_welcome(self) -> None:
        s = self.q.styling
        self._print(
            s.create_box(
                "quizzer demo\n\nThis demo shows the classic helpers\nand the newer prompts.",
                style="double",
                border_color="#00d4aa",
                padding=2,
                title="Welcome",
            ),
            "",
        )
        proceed = await self.q.confirm(message="Ready to explore the features?", default=True)
        self.runner.run_stage("compatibility" if proceed else "final")

    async def stage_compatibility(self) -> None:
        s = self.q.styling
        self._print(s.paint("Classic API", "#ffd700", bold=True), s.paint("Using the original helpers...", "muted"), "")

        self.user_data["name"] = await self.q.ask_question("What is your name?", self.q.GREEN)
        self.user_data["languages"] = await self.q.ask_multiline_question(
            "What are your favourite programming languages?", " - "
        )
        self.user_data["framework"] = await self.q.show_menu(
            "Choose your preferred framework:",
            {"django": "Django", "flask": "Flask", "fastapi": "FastAPI", "aiohttp": "aiohttp"},
            "Framework Selection",
        )
        self._print("", s.paint("Classic helpers still work!", "success"), "")
        self.runner.run_stage("modern")

    async def stage_modern(self) -> None:
        s = self.q.styling
        self._print(s.gradient("Modern prompts", ["#6b73ff", "#9b59b6", "#3498db"]), "")

        self.user_data["email"] = await self.q.input(
            message="Enter your email:",
            placeholder="user@example.com",
            validate=lambda value: bool(EMAIL_PATTERN.match(value)) or "Please enter a valid email address",
            required=True,
        )
        await self.q.password(
            message="Create a password:",
            validate=lambda value: len(value) >= 6 or "Password must be at least 6 characters",
        )
        self.user_data["age"] = await self.q.number(message="Enter your age:", min=13, max=120)
        self.user_data["skills"] = await self.q.multiselect(
            message="Select your skills:",
            choices=[
                {"name": "Python", "value": "python"},
                {"name": "TypeScript", "value": "ts"},
                {"name": "Go", "value": "go"},
                {"name": "Rust", "value": "rust"},
                {"name": "Docker", "value": "docker"},
                {"name": "Kubernetes", "value": "k8s"},
            ],
            min=1,
            max=5,
        )
        self.user_data["experience"] = await self.q.select(
            message="Years of experience:",
            choices=[
                {"name": "0-1 years (Beginner)", "value": "beginner"},
                {"name": "2-4 years (Intermediate)", "value": "intermediate"},
                {"name": "5-9 years (Advanced)", "value": "advanced"},
                {"name": "10+ years (Expert)", "value": "expert"},
            ],
        )
        self.user_data["city"] = await self.q.select(
            message="Nearest city:",
            choices=["Amsterdam", "Berlin", "Lisbon", "London", "Madrid", "Paris", "Rome", "Vienna"],
            searchable=True,
            page_size=5,
        )
        await self.q.show_spinner("Saving answers", 1.0)
        self.runner.run_stage("table")

    async def stage_table(self) -> None:
        s = self.q.styling
        self._print(s.paint("Table demo", "#ff6b6b", bold=True), "")
        rows = [
            {"name": "John Doe", "role": "Developer", "experience": 5, "skills": "Python, React, SQL", "salary": 75000},
            {"name": "Jane Smith", "role": "Designer", "experience": 3, "skills": "Figma, CSS, UI/UX", "salary": 65000},
            {"name": "Bob Wilson", "role": "DevOps", "experience": 7, "skills": "Docker, K8s, AWS", "salary": 95000},
            {"name": "Alice Brown", "role": "Product Manager", "experience": 4, "skills": "Agile, Analytics", "salary": 85000},
            {"name": "Charlie Davis", "role": "Full Stack", "experience": 6, "skills": "Python, Vue, Postgres", "salary": 80000},
        ]
        table = (
            self.q.table(border_style="rounded", sortable=True)
            .set_title("Employee Directory")
            .set_columns(
                [
                    {"name": "name", "label": "Name", "width": 15},
                    {"name": "role", "label": "Role", "width": 15},
                    {"name": "experience", "label": "Exp (years)", "width": 12, "align": "center"},
                    {"name": "skills", "label": "Skills", "width": 20},
                    {
                        "name": "salary",
                        "label": "Salary",
                        "width": 12,
                        "align": "right",
                        "formatter": lambda value, row: f"${value:,}",
                    },
                ]
            )
            .set_rows(rows)
            .sort("salary", "desc")
        )
        picked = await table.show_table_menu()
        if picked is not None:
            self.user_data["colleague"] = rows[picked]["name"]

        progress = self.q.show_progress(len(rows), "Exporting")
        for _ in rows:
            await asyncio.sleep(0.1)
            progress.increment()
        self.runner.run_stage("form")

    async def stage_form(self) -> None:
        s = self.q.styling
        self._print(s.paint("Form demo", "#9b59b6", bold=True), "")
        form = await self.q.form(
            title="Project Setup Form",
            fields=[
                {
                    "name": "project_name",
                    "label": "Project name:",
                    "type": "input",
                    "required": True,
                    "validate": lambda value: bool(PROJECT_NAME_PATTERN.match(value))
                    or "Only alphanumeric, dash, and underscore allowed",
                },
                {"name": "description", "label": "Project description:", "placeholder": "Brief description"},
                {
                    "name": "type",
                    "label": "Project type:",
                    "type": "select",
                    "choices": [
                        {"name": "Web Application", "value": "web"},
                        {"name": "CLI Tool", "value": "cli"},
                        {"name": "Library/Package", "value": "library"},
                    ],
                },
                {"name": "team_size", "label": "Team size:", "type": "number", "min": 1, "max": 50},
                {"name": "open_source", "label": "Make it open source?", "type": "confirm", "default": False},
            ],
        )
        self.user_data["project"] = form

        summary = "\n".join(
            f"{key}: {', '.join(map(str, value)) if isinstance(value, list) else value}"
            for key, value in form.items()
        )
        self._print(
            s.create_box(
                "Form completed successfully!\n\n" + summary,
                style="double",
                border_color="#00ff7f",
                title="Form Results",
            )
        )
        self.runner.run_stage("final")

    def stage_final(self) -> None:
        s = self.q.styling
        self._print(
            s.gradient("Demo complete!", ["#ff6b6b", "#4ecdc4", "#45b7d1", "#ffd700"]),
            "",
            s.paint("Data collected:", "muted"),
            json.dumps(self.user_data, indent=2, default=str),
        )
        self.runner.end()


def main(argv: list[str] | None = None) -> None:
    """Entry point for the demo."""
    import argparse

    parser = argparse.ArgumentParser(description="quizzer demo")
    parser.add_argument("--theme", choices=["default", "dark", "light"], help="Colour theme")
    parser.add_argument("--no-animations", action="store_true", help="Skip spinner animation")
    parser.add_argument("--debug", action="store_true", help="Write debug logs to quizzer-demo.log")
    args = parser.parse_args(argv)

    setup_logging(args.debug)

    overrides: dict[str, Any] = {}
    if args.theme:
        overrides["theme"] = args.theme
    if args.no_animations:
        overrides["animations"] = False
    questioner = Questioner.from_config(**overrides)

    try:
        asyncio.run(DemoQuiz(questioner).run())
    except (KeyboardInterrupt, EOFError):
        print()
        sys.exit(130)
    except QuizzerError as e:
        _logging.error("Demo aborted: %s", e)
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)
    finally:
        questioner.close()
    print("\nThanks for using quizzer!")


if __name__ == "__main__":
    main()
