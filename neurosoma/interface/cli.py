"""CLI interface for NeuroSoma using Rich."""

import argparse
import logging

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from neurosoma.agent.education import EducationRequest, EducationResponse, educate
from neurosoma.agent.evaluator import (
    EVALUATION_CRITERIA,
    EVALUATION_DATASET,
    run_evaluation,
    save_summary,
)
from neurosoma.agent.llm import MODEL, check_llm_health, get_client
from neurosoma.agent.protocol_matcher import (
    MatchedProtocol,
    get_protocol_summary,
    get_safety_badge,
    match_protocol,
)
from neurosoma.memory.plan_store import JsonFilePlanStore, PlanStore
from neurosoma.tools.intake import EXPERIENCE_LEVELS, GOALS, OBSTACLES, IntakeError, parse_intake
from neurosoma.tools.plan_generator import ActionPlan, generate_plan

console = Console()


def display_plan(plan: ActionPlan) -> None:
    """Display an action plan as Rich tables, one per day."""
    ctx = plan.user_context
    technique = plan.matched_technique
    console.print(
        Panel(
            f"Goal: {ctx.goal} | Obstacle: {ctx.obstacle} | Days until event: {ctx.days_until}\n"
            f"Core technique: [bold]{escape(technique.title)}[/bold] "
            f"({technique.duration_min} min/session) - {escape(technique.description)}",
            title=f"Plan {plan.id}",
            style="blue",
        )
    )

    for day in plan.schedule:
        table = Table(title=day.title, caption=day.focus, show_lines=True)
        table.add_column("Type", style="cyan", width=10)
        table.add_column("Duration", justify="right", width=10)
        table.add_column("Task", width=70)
        for task in day.tasks:
            table.add_row(task.type, f"{task.duration_min} min", escape(task.description))
        console.print(table)

    ritual = plan.ritual
    lines = []
    for label, steps in (
        ("Morning", ritual.morning),
        ("Pre-event", ritual.pre_event),
        ("During event", ritual.during_event),
    ):
        lines.append(f"[bold]{label}[/bold]")
        lines.extend(f"  - {escape(step)}" for step in steps)
    console.print(Panel("\n".join(lines), title="Daily Ritual", style="green"))


def display_protocol(protocol: MatchedProtocol) -> None:
    """Display a matched protocol week by week."""
    badge = get_safety_badge(protocol.type)
    console.print(
        Panel(
            f"{escape(get_protocol_summary(protocol))}\n\n{escape(protocol.rationale)}",
            title=f"{escape(protocol.name)} - {badge['label']}",
            style=badge["color"],
        )
    )

    table = Table(title="Protocol Weeks", show_lines=True)
    table.add_column("Week", style="bold", width=6)
    table.add_column("Focus", width=30)
    table.add_column("Techniques", width=40)
    table.add_column("Dose", width=22)
    table.add_column("Cautions", width=30)
    for week in protocol.weeks:
        table.add_row(
            str(week.week),
            f"{escape(week.title)}\n[dim]{escape(week.focus)}[/dim]",
            "\n".join(escape(t) for t in week.techniques),
            f"{week.duration}\n{week.frequency}",
            "\n".join(escape(c) for c in week.cautions) or "-",
        )
    console.print(table)


def display_education(education: EducationResponse) -> None:
    """Display the structured education sections."""
    for title, body in (
        ("Anatomy & Physiology", education.anatomy_physiology),
        ("Research Evidence", education.research_evidence),
        ("How to Explain This to Your Doctor", education.communication_guide),
    ):
        console.print(Panel(escape(body), title=title))

    c = education.contraindications
    lines = ["[bold red]Absolute[/bold red]"]
    lines.extend(f"  - {escape(i)}" for i in c.absolute)
    if c.relative:
        lines.append("[bold yellow]Relative[/bold yellow]")
        lines.extend(f"  - {escape(i)}" for i in c.relative)
    lines.append("[bold]Stop immediately if[/bold]")
    lines.extend(f"  - {escape(i)}" for i in c.warning_signs)
    lines.append(f"[bold]Medications:[/bold] {escape(c.medication_notes)}")
    console.print(Panel("\n".join(lines), title="Contraindications & Precautions"))

    questions = "\n".join(
        f"{i}. {escape(q)}" for i, q in enumerate(education.questions_for_doctor, 1)
    )
    console.print(Panel(questions, title="Questions for Your Doctor"))
    console.print(f"[dim]{escape(education.disclaimer)}[/dim]")


def run_plan(parsed: argparse.Namespace, store: PlanStore) -> ActionPlan | None:
    """Validate intake flags, generate a plan, store and display it."""
    raw = {
        "goal": parsed.goal,
        "obstacle": parsed.obstacle,
        "event_date": parsed.event_date,
        "time_commitment": parsed.minutes,
        "experience": parsed.experience,
        "email": parsed.email,
    }
    try:
        intake = parse_intake(raw)
    except IntakeError as e:
        console.print("[red]Invalid intake data:[/red]")
        for name, message in e.details.items():
            console.print(f"  [red]{name}[/red]: {escape(message)}")
        return None

    plan = generate_plan(intake)
    store.put(plan, intake)
    display_plan(plan)
    console.print(f"[green]Plan saved. Retrieve it with --show {plan.id}[/green]")
    return plan


def run_show(plan_id: str, store: PlanStore) -> ActionPlan | None:
    plan = store.get(plan_id)
    if plan is None:
        console.print(f"[red]Plan not found: {escape(plan_id)}[/red]")
        return None
    display_plan(plan)
    return plan


def run_educate(question: str, condition: str | None, treatments: str | None) -> None:
    """Ask the model for education and show the matched protocol."""
    request = EducationRequest(
        health_question=question,
        condition=condition,
        current_treatments=treatments,
    )
    console.print("[yellow]Requesting health education...[/yellow]")
    try:
        education, protocol = educate(request)
    except ValueError as e:
        console.print(f"[red]{escape(str(e))}[/red]")
        return
    except Exception as e:
        healthy = check_llm_health()
        if healthy:
            console.print(f"[red]Failed to generate education response: {escape(str(e))}[/red]")
        else:
            console.print("[red]The model service is unavailable. Please try again shortly.[/red]")
        return

    display_education(education)
    display_protocol(protocol)


def display_evaluation(summary: dict) -> None:
    """Display an evaluation run: composite, per criterion and per category."""
    scored = round(summary["success_rate"] * len(summary["results"]))
    console.print(
        Panel(
            f"Composite score: [bold]{summary['composite_score'] * 100:.1f}%[/bold]\n"
            f"Success rate: {scored}/{len(summary['results'])}\n"
            f"Avg latency: {summary['avg_latency_ms'] / 1000:.1f}s | "
            f"Total time: {summary['total_time_s']:.1f}s",
            title="Evaluation",
            style="blue",
        )
    )

    table = Table(title="Per criterion (1-5)")
    table.add_column("Criterion", style="cyan")
    table.add_column("Average", justify="right")
    for name, avg in summary["per_criterion"].items():
        table.add_row(name, f"{avg:.2f}")
    console.print(table)

    table = Table(title="Per category")
    table.add_column("Category", style="cyan")
    table.add_column("Composite", justify="right")
    for name, avg in summary["per_category"].items():
        table.add_row(name, f"{avg * 100:.0f}%")
    console.print(table)


def run_evaluate(limit: int | None, output_dir: str | None) -> dict | None:
    """Run the judge over the evaluation questions and save the summary."""
    queries = EVALUATION_DATASET[:limit] if limit else EVALUATION_DATASET
    console.print(
        f"[yellow]Evaluating {len(queries)} questions on {len(EVALUATION_CRITERIA)} criteria...[/yellow]"
    )
    try:
        client = get_client()
    except ValueError as e:
        console.print(f"[red]{escape(str(e))}[/red]")
        return None

    summary = run_evaluation(queries, client=client)

    display_evaluation(summary)
    path = save_summary(summary, output_dir)
    console.print(f"[green]Saved: {escape(str(path))}[/green]")
    return summary


def main(args: list[str] | None = None):
    """Main CLI entry point with argument parsing."""
    parser = argparse.ArgumentParser(
        prog="neurosoma",
        description="NeuroSoma - breathwork education and practice planning",
    )
    parser.add_argument("--plan", action="store_true", help="Generate a practice plan from intake flags")
    parser.add_argument("--goal", choices=GOALS)
    parser.add_argument("--obstacle", choices=OBSTACLES)
    parser.add_argument("--event-date", metavar="YYYY-MM-DD")
    parser.add_argument("--minutes", type=float, default=None, help="Daily time commitment (default 15)")
    parser.add_argument("--experience", choices=EXPERIENCE_LEVELS, default=None)
    parser.add_argument("--email")
    parser.add_argument("--show", metavar="PLAN_ID", help="Show a stored plan")
    parser.add_argument("--protocol", metavar="TYPE", help="Show the gentle, moderate or standard protocol")
    parser.add_argument("--educate", metavar="QUESTION", help="Ask a health question")
    parser.add_argument("--condition", help="Condition label for --educate / --protocol")
    parser.add_argument("--treatments", help="Current treatments for --educate")
    parser.add_argument("--health", action="store_true", help="Check the model endpoint")
    parser.add_argument("--evaluate", action="store_true", help="Score answers to the evaluation questions")
    parser.add_argument("--eval-limit", type=int, default=None, help="Only evaluate the first N questions")
    parser.add_argument("--eval-dir", help="Directory for evaluation results (default data/evaluations)")
    parser.add_argument("--plans-dir", help="Directory for stored plans (default data/plans)")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")

    parsed = parser.parse_args(args)

    logging.basicConfig(
        level=logging.DEBUG if parsed.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    store = JsonFilePlanStore(parsed.plans_dir)

    if parsed.plan:
        run_plan(parsed, store)
        return

    if parsed.show:
        run_show(parsed.show, store)
        return

    if parsed.protocol:
        display_protocol(match_protocol(parsed.protocol, parsed.condition))
        return

    if parsed.educate:
        run_educate(parsed.educate, parsed.condition, parsed.treatments)
        return

    if parsed.evaluate:
        run_evaluate(parsed.eval_limit, parsed.eval_dir)
        return

    if parsed.health:
        status = "healthy" if check_llm_health() else "unavailable"
        console.print(f"Model {MODEL}: [bold]{status}[/bold]")
        return

    parser.print_help()


if __name__ == "__main__":
    main()
