"""Interactive CLI application."""
from dataclasses import dataclass

from rich.console import Console
from rich.panel import Panel
from rich.prompt import Confirm, IntPrompt, Prompt
from rich.table import Table

from prep_ace import catalog, quiz as quiz_states
from prep_ace.badges import BadgeEngine
from prep_ace.bookmarks import Bookmarks
from prep_ace.chat import ChatSession, QAChat, SupportChat, TopicTutor
from prep_ace.config import Settings, load_settings
from prep_ace.dashboard import get_progress_summary, get_readiness_color, get_topic_scores
from prep_ace.errors import GenerationError, ValidationError
from prep_ace.flashcards import MAX_FLASHCARDS, MIN_FLASHCARDS, FlashcardSession
from prep_ace.generator import GeminiGenerator, Generator
from prep_ace.history import QuizHistory
from prep_ace.language import SUPPORTED_LANGUAGES, LanguagePreference, language_name
from prep_ace.logging_config import init_logging
from prep_ace.models import DIFFICULTIES, EXPLANATION_STYLES, QuizConfig
from prep_ace.notices import ERROR, SUCCESS, WARNING
from prep_ace.points import PointsLedger
from prep_ace.quiz import MAX_QUESTIONS, MIN_QUESTIONS, QuizSession
from prep_ace.reset import CLEAR_GROUPS, clear_all, clear_group
from prep_ace.stats import StatsTracker
from prep_ace.store import PersistentStore, SqliteStore
from prep_ace.streak import StreakTracker
from prep_ace.tools import CATEGORIES, CurrentAffairs, QuestionSolver, StudyPlanner

console = Console()

LETTERS = "abcd"

_STYLES = {SUCCESS: "green", WARNING: "yellow", ERROR: "red"}


class SessionExitRequested(Exception):
    """Raised when the user types 'q' or 'menu' inside a session."""


def console_notify(message: str, level: str = "info") -> None:
    style = _STYLES.get(level, "cyan")
    console.print(f"[{style}]{message}[/{style}]")


def session_prompt(prompt: str, **kwargs) -> str:
    answer = Prompt.ask(prompt, **kwargs)
    if answer.strip().lower() in ("q", "menu"):
        raise SessionExitRequested()
    return answer


def session_int_prompt(prompt: str, **kwargs) -> int:
    choices = kwargs.pop("choices", None)
    while True:
        answer = session_prompt(prompt, **kwargs).strip()
        if answer.lstrip("-").isdigit() and (choices is None or answer in choices):
            return int(answer)
        console.print("[red]Please enter a valid number.[/red]")


class UnavailableGenerator(Generator):
    """Stand-in used when no provider key is configured."""

    def _fail(self, *args, **kwargs):
        raise GenerationError("AI generation is unavailable: set GEMINI_API_KEY and restart.")

    generate_quiz = generate_flashcards = solve_paper = generate_study_plan = _fail
    answer_question = clarify_question = summarize_current_affairs = _fail


@dataclass
class AppContext:
    store: PersistentStore
    language: LanguagePreference
    points: PointsLedger
    stats: StatsTracker
    streak: StreakTracker
    badges: BadgeEngine
    history: QuizHistory
    quiz: QuizSession
    flashcards: FlashcardSession
    solver: QuestionSolver
    planner: StudyPlanner
    current_affairs: CurrentAffairs
    qa_chat: QAChat
    support_chat: SupportChat
    tutor: TopicTutor
    bookmarks: Bookmarks


def build_context(store: PersistentStore, generator: Generator, notify=console_notify,
                  history_limit: int = 50) -> AppContext:
    language = LanguagePreference(store)
    points = PointsLedger(store)
    stats = StatsTracker(store)
    streak = StreakTracker(store, notify)
    badges = BadgeEngine(store, stats, points, streak, notify)
    history = QuizHistory(store, history_limit)
    ctx = AppContext(
        store=store,
        language=language,
        points=points,
        stats=stats,
        streak=streak,
        badges=badges,
        history=history,
        quiz=QuizSession(store, generator, points, stats, badges, history, language, notify),
        flashcards=FlashcardSession(store, generator, stats, badges, language, notify),
        solver=QuestionSolver(store, generator, language, notify),
        planner=StudyPlanner(store, generator, language, notify),
        current_affairs=CurrentAffairs(store, generator, language, notify),
        qa_chat=QAChat(store, generator, language, notify),
        support_chat=SupportChat(store, generator, language, notify),
        tutor=TopicTutor(store, generator, language, notify),
        bookmarks=Bookmarks(store),
    )
    for component in (ctx.quiz, ctx.flashcards, ctx.solver, ctx.planner, ctx.current_affairs):
        component.watch_language()
    return ctx


def show_welcome(ctx: AppContext):
    console.print(Panel(
        "[bold]RRB NTPC Prep Ace[/bold]\n[dim]AI quizzes, flashcards and study plans[/dim]\n"
        f"[dim]Content language: {language_name(ctx.language.get())}[/dim]",
        title="Welcome", border_style="blue",
    ))


def show_menu():
    console.print("\n[bold]Commands:[/bold]")
    commands = [
        ("quiz", "AI quiz generator"),
        ("flashcards", "AI flashcards"),
        ("goal", "Daily goal + streak"),
        ("progress", "Points, stats and badges"),
        ("history", "Past quiz attempts"),
        ("solve", "Solve a question paper"),
        ("plan", "Generate a study plan"),
        ("news", "Current affairs summary"),
        ("chat", "Ask the AI anything"),
        ("tutor", "Topic tutor"),
        ("support", "Chat support"),
        ("bookmarks", "Saved answers"),
        ("language", "Language for AI content"),
        ("reset", "Clear stored data"),
        ("quit", "Exit"),
    ]
    for cmd, desc in commands:
        console.print(f"  [cyan]{cmd:<14}[/cyan] {desc}")


def choose(prompt: str, options: list) -> str:
    for i, option in enumerate(options, 1):
        console.print(f"  [cyan]{i}[/cyan]) {option}")
    choices = [str(i) for i in range(1, len(options) + 1)]
    picked = session_int_prompt(prompt, choices=choices)
    return options[picked - 1]


def ask_subject_and_topic() -> tuple[str, str]:
    subject = choose("Select subject", catalog.get_subjects())
    topic = choose("Select topic", catalog.get_topics(subject))
    return subject, topic


def render_question(session: QuizSession) -> None:
    index = session.current_index
    question = session.current_question
    selected = session.user_answers[index]
    console.print(f"\n[bold]Q{index + 1}/{len(session.questions)}.[/bold] {question.question}\n")
    for letter, option in zip(LETTERS, question.options):
        marker = " [green]<[/green]" if option == selected else ""
        console.print(f"  [cyan]{letter})[/cyan] {option}{marker}")


def run_quiz_session(session: QuizSession):
    """Collect answers until the user submits. Returns the graded result."""
    while True:
        render_question(session)
        question = session.current_question
        letters = list(LETTERS[:len(question.options)])
        answer = session_prompt(
            "\nAnswer (letter), [n]ext, [p]revious, [s]ubmit",
            choices=letters + ["n", "p", "s", "q"],
        ).strip().lower()
        if answer in letters:
            session.select_answer(session.current_index, question.options[letters.index(answer)])
            if session.current_index < len(session.questions) - 1:
                session.navigate(1)
                continue
            answer = "s"
        if answer == "n":
            session.navigate(1)
        elif answer == "p":
            session.navigate(-1)
        elif answer == "s":
            missing = len(session.questions) - session.answered_count
            if missing and not Confirm.ask(f"{missing} question(s) unanswered. Submit anyway?"):
                continue
            return session.submit()


def show_quiz_result(result) -> None:
    table = Table(title=f"{result.config.topic} ({result.config.difficulty})")
    table.add_column("#", justify="right")
    table.add_column("Your answer")
    table.add_column("Correct answer")
    table.add_column("")
    for i, answered in enumerate(result.questions, 1):
        mark = "[green]✓[/green]" if answered.is_correct else "[red]✗[/red]"
        table.add_row(str(i), answered.user_answer or "[dim]-[/dim]", answered.question.answer, mark)
    console.print(table)
    color = get_readiness_color(result.accuracy)
    console.print(
        f"[bold]Score: {result.score}/{result.total_questions}[/bold] "
        f"([{color}]{result.accuracy:.0f}%[/{color}])  +{result.points_earned} points"
    )
    for i, answered in enumerate(result.questions, 1):
        if not answered.is_correct and answered.question.explanation:
            console.print(f"[dim]Q{i}: {answered.question.explanation}[/dim]")


def cmd_quiz(ctx: AppContext):
    session = ctx.quiz
    if session.state == quiz_states.TAKING and Confirm.ask("Resume the quiz in progress?", default=True):
        show_quiz_result(run_quiz_session(session))
        session.new_quiz()
        return
    console.print("\n[bold]AI Quiz Generator[/bold]")
    subject, topic = ask_subject_and_topic()
    count = session_int_prompt(
        f"Number of questions ({MIN_QUESTIONS}-{MAX_QUESTIONS})",
        choices=[str(n) for n in range(MIN_QUESTIONS, MAX_QUESTIONS + 1)], default="5",
    )
    difficulty = session_prompt("Difficulty", choices=list(DIFFICULTIES), default="Medium")
    style = session_prompt("Explanation style", choices=list(EXPLANATION_STYLES), default="Standard")
    session.configure(QuizConfig(subject, topic, count, difficulty, style))
    with console.status("Generating questions..."):
        ready = session.generate()
    if not ready:
        return
    show_quiz_result(run_quiz_session(session))
    session.new_quiz()


def cmd_flashcards(ctx: AppContext):
    session = ctx.flashcards
    if not (session.cards and Confirm.ask("Continue with the current deck?", default=True)):
        console.print("\n[bold]AI Flashcards[/bold]")
        subject, topic = ask_subject_and_topic()
        count = session_int_prompt(
            f"Number of flashcards ({MIN_FLASHCARDS}-{MAX_FLASHCARDS})",
            choices=[str(n) for n in range(MIN_FLASHCARDS, MAX_FLASHCARDS + 1)], default="5",
        )
        session.configure(subject, topic, count)
        with console.status("Generating flashcards..."):
            if not session.generate():
                return
    while True:
        card = session.current_card
        side = card.definition if session.flipped else card.term
        console.print(Panel(
            side,
            title=f"Card {session.current_index + 1}/{len(session.cards)}",
            border_style="green" if session.flipped else "cyan",
        ))
        action = session_prompt("[f]lip, [n]ext, [p]revious, [d]one", choices=["f", "n", "p", "d", "q"], default="f")
        if action == "f":
            session.flip()
        elif action == "n":
            session.navigate(1)
        elif action == "p":
            session.navigate(-1)
        else:
            return


def cmd_goal(ctx: AppContext):
    state = ctx.streak.load()
    if state.current_streak:
        days = "day" if state.current_streak == 1 else "days"
        console.print(f"[bold dark_orange]Current streak: {state.current_streak} {days}[/bold dark_orange]")
    if state.daily_goal:
        status = "[green]achieved[/green]" if state.goal_achieved_today else "[yellow]pending[/yellow]"
        console.print(f"Today's goal: [bold]{state.daily_goal}[/bold] ({status})")
    if state.goal_achieved_today:
        return
    action = Prompt.ask("[s]et goal, mark [a]chieved, [b]ack", choices=["s", "a", "b"], default="b")
    if action == "s":
        ctx.streak.set_goal(Prompt.ask("What's your study goal for today?"))
    elif action == "a" and ctx.streak.achieve_goal():
        ctx.badges.check_and_award()


def cmd_progress(ctx: AppContext):
    summary = get_progress_summary(ctx.points, ctx.stats, ctx.streak, ctx.badges, ctx.history)
    color = get_readiness_color(summary["avg_accuracy"])
    console.print(Panel(
        f"[bold]{summary['points']}[/bold] points  |  streak [bold]{summary['current_streak']}[/bold]  |  "
        f"badges [bold]{summary['badges_earned']}/{summary['badges_total']}[/bold]",
        title="Your Progress", border_style="blue",
    ))
    console.print(f"  Quizzes: [bold]{summary['quizzes_completed']}[/bold]  |  "
                  f"Topics: [bold]{summary['unique_topics']}[/bold]  |  "
                  f"Flashcard sets: [bold]{summary['flashcard_sets']}[/bold]  |  "
                  f"Recent accuracy: [{color}]{summary['avg_accuracy']}% {summary['readiness']}[/{color}]")

    table = Table(title="Badges")
    table.add_column("Badge", style="cyan")
    table.add_column("Category")
    table.add_column("How to earn")
    table.add_column("Earned")
    for badge in ctx.badges.board():
        earned = f"[green]{badge['earned_at'][:10]}[/green]" if badge["earned_at"] else "[dim]locked[/dim]"
        table.add_row(badge["name"], badge["category"], badge["description"], earned)
    console.print(table)


def cmd_history(ctx: AppContext):
    attempts = ctx.history.recent()
    if not attempts:
        console.print("[yellow]No quiz attempts yet.[/yellow]")
        return
    table = Table(title="Quiz Attempt History")
    table.add_column("#", justify="right")
    table.add_column("Date")
    table.add_column("Subject / Topic")
    table.add_column("Score", justify="right")
    table.add_column("Lang")
    for i, attempt in enumerate(attempts, 1):
        color = get_readiness_color(attempt.accuracy)
        table.add_row(
            str(i), attempt.timestamp[:16].replace("T", " "),
            f"{attempt.config.subject} / {attempt.config.topic}",
            f"[{color}]{attempt.score}/{attempt.total_questions}[/{color}]", attempt.language,
        )
    console.print(table)
    topic_scores = get_topic_scores(ctx.history)
    weakest = min(topic_scores, key=topic_scores.get) if topic_scores else None
    if weakest and topic_scores[weakest] < 65:
        console.print(f"\n  [yellow]Recommendation: revise {weakest} ({topic_scores[weakest]}%)[/yellow]")
    action = Prompt.ask("Attempt # to review, [c]lear history, [b]ack", default="b").strip().lower()
    if action == "c" and Confirm.ask("Delete all quiz history?"):
        ctx.history.clear()
        console_notify("Quiz history cleared!", SUCCESS)
    elif action.isdigit() and 1 <= int(action) <= len(attempts):
        show_quiz_result(attempts[int(action) - 1])


def cmd_solve(ctx: AppContext):
    cached = ctx.solver.cached()
    if cached and Confirm.ask("Show the last solution?", default=True):
        result = cached
    else:
        console.print("Paste the question paper. Finish with an empty line.")
        lines = []
        while True:
            line = Prompt.ask("", default="", show_default=False)
            if not line:
                break
            lines.append(line)
        with console.status("Solving..."):
            result = ctx.solver.solve("\n".join(lines))
        if result is None:
            return
    console.print(Panel(result["solutions"], title="Solutions", border_style="cyan"))
    console.print(Panel(result["answer_key"], title="Answer Key", border_style="green"))


def cmd_plan(ctx: AppContext):
    plan = ctx.planner.cached()
    if not (plan and Confirm.ask("Show your saved study plan?", default=True)):
        target = Prompt.ask("Target exam", default="RRB NTPC 2025")
        months = IntPrompt.ask("Study duration in months", default=3)
        hours = IntPrompt.ask("Hours per week", default=10)
        subjects = [s.strip() for s in Prompt.ask("Subjects to focus on (comma separated)", default="").split(",")]
        with console.status("Building your plan..."):
            plan = ctx.planner.plan(target, months, hours, subjects)
        if plan is None:
            return
    console.print(Panel(plan["overview"], title=plan["plan_title"], border_style="blue"))
    table = Table(title="Weekly Breakdown")
    table.add_column("Period", style="cyan")
    table.add_column("Focus areas")
    table.add_column("Activities")
    for week in plan["weekly_breakdown"]:
        table.add_row(week["week"], "\n".join(week["focus_areas"]), "\n".join(week["suggested_activities"]))
    console.print(table)
    for tip in plan["tips_for_success"]:
        console.print(f"  [green]•[/green] {tip}")


def cmd_news(ctx: AppContext):
    summary = ctx.current_affairs.cached()
    request = ctx.current_affairs.cached_request() or {}
    category = request.get("category", "General")
    if not (summary and Confirm.ask(f"Show the saved {category} summary?", default=True)):
        category = choose("Select category", list(CATEGORIES))
        with console.status("Fetching current affairs..."):
            summary = ctx.current_affairs.summarize(category)
        if summary is None:
            return
    console.print(Panel(summary["summary"], title=f"Current Affairs: {category}", border_style="blue"))


def run_chat(ctx: AppContext, chat: ChatSession, title: str, context=None):
    """Chat until the user types 'q'. 'b' bookmarks (or un-bookmarks) the last reply."""
    console.print(f"\n[bold]{title}[/bold] [dim](b = bookmark last answer, clear = new chat, q = back)[/dim]")
    for message in chat.messages()[-6:]:
        who = "[cyan]You[/cyan]" if message.role == "user" else "[green]AI[/green]"
        console.print(f"{who}: {message.content}")
    while True:
        text = session_prompt("\n[bold]You[/bold]", default="", show_default=False).strip()
        if not text:
            continue
        if text.lower() == "b":
            reply = chat.last_reply()
            if reply is None:
                console.print("[yellow]Nothing to bookmark yet.[/yellow]")
            elif ctx.bookmarks.toggle(reply, chat.messages(), chat.source, context):
                console_notify("Answer bookmarked.", SUCCESS)
            else:
                console_notify("Bookmark removed.", SUCCESS)
            continue
        if text.lower() == "clear":
            chat.clear()
            console.print("[dim]Conversation cleared.[/dim]")
            continue
        with console.status("Thinking..."):
            reply = chat.ask(text)
        console.print(Panel(reply.content, title="AI", border_style="green"))


def cmd_chat(ctx: AppContext):
    run_chat(ctx, ctx.qa_chat, "AI Q&A Chat")


def cmd_support(ctx: AppContext):
    run_chat(ctx, ctx.support_chat, "Chat Support")


def cmd_tutor(ctx: AppContext):
    selection = ctx.tutor.selection()
    if not (selection and Confirm.ask(
            f"Continue with {selection['subject']} / {selection['topic']}?", default=True)):
        subject, topic = ask_subject_and_topic()
        selection = ctx.tutor.select(subject, topic)
    run_chat(ctx, ctx.tutor, f"Topic Tutor: {selection['topic']}", context=selection)


def cmd_bookmarks(ctx: AppContext):
    bookmarks = ctx.bookmarks.recent()
    if not bookmarks:
        console.print("[yellow]No bookmarks yet. Bookmark answers from the chats.[/yellow]")
        return
    table = Table(title="Bookmarks")
    table.add_column("#", justify="right")
    table.add_column("Saved")
    table.add_column("From")
    table.add_column("Question")
    for i, bookmark in enumerate(bookmarks, 1):
        source = bookmark.source
        if bookmark.context:
            source += f" ({bookmark.context.get('topic', '')})"
        table.add_row(str(i), bookmark.bookmarked_at[:16].replace("T", " "), source, bookmark.user_prompt[:60])
    console.print(table)
    action = Prompt.ask("Bookmark # to view, [r]emove, [b]ack", default="b").strip().lower()
    if action == "r":
        number = IntPrompt.ask("Bookmark # to remove")
        if 1 <= number <= len(bookmarks) and ctx.bookmarks.remove(bookmarks[number - 1].bookmark_id):
            console_notify("Bookmark removed.", SUCCESS)
    elif action.isdigit() and 1 <= int(action) <= len(bookmarks):
        bookmark = bookmarks[int(action) - 1]
        console.print(f"[cyan]Q:[/cyan] {bookmark.user_prompt}")
        console.print(Panel(bookmark.assistant_response, title=bookmark.source, border_style="green"))


def cmd_language(ctx: AppContext):
    current = ctx.language.get()
    for code, name in SUPPORTED_LANGUAGES.items():
        marker = " [green](current)[/green]" if code == current else ""
        console.print(f"  [cyan]{code}[/cyan]  {name}{marker}")
    code = Prompt.ask("Language code", choices=list(SUPPORTED_LANGUAGES), default=current)
    if code != current:
        ctx.language.set(code)
        console_notify(f"AI language preference updated to {language_name(code)}.", SUCCESS)


def cmd_reset(ctx: AppContext):
    groups = list(CLEAR_GROUPS) + ["all"]
    group = Prompt.ask("What should be cleared?", choices=groups + ["cancel"], default="cancel")
    if group == "cancel" or not Confirm.ask(f"Clear {group} data? This cannot be undone."):
        return
    if group in ("quiz", "all"):
        ctx.quiz.clear()
        ctx.flashcards.clear()
    if group == "all":
        clear_all(ctx.store)
    else:
        clear_group(ctx.store, group)
    console_notify(f"Cleared {group} data.", SUCCESS)


def build_generator(settings: Settings) -> Generator:
    try:
        return GeminiGenerator(settings.gemini_api_key, settings.model)
    except GenerationError as e:
        console.print(f"[yellow]{e} AI features are disabled.[/yellow]")
        return UnavailableGenerator()


COMMANDS = {
    "quiz": cmd_quiz,
    "flashcards": cmd_flashcards,
    "goal": cmd_goal,
    "progress": cmd_progress,
    "history": cmd_history,
    "solve": cmd_solve,
    "plan": cmd_plan,
    "news": cmd_news,
    "chat": cmd_chat,
    "tutor": cmd_tutor,
    "support": cmd_support,
    "bookmarks": cmd_bookmarks,
    "language": cmd_language,
    "reset": cmd_reset,
}


def main():
    settings = load_settings()
    init_logging(settings.log_level, settings.log_format)
    store = SqliteStore(settings.db_path)
    ctx = build_context(store, build_generator(settings), history_limit=settings.history_limit)
    ctx.quiz.restore()
    ctx.flashcards.restore()

    show_welcome(ctx)

    while True:
        show_menu()
        choice = Prompt.ask("\n[bold]>[/bold]", default="quiz").strip().lower()
        store.refresh()
        try:
            if choice in ("quit", "exit", "q"):
                console.print("[dim]Good luck on your exam![/dim]")
                break
            command = COMMANDS.get(choice)
            if command is None:
                console.print("[red]Unknown command. Try again.[/red]")
                continue
            command(ctx)
        except SessionExitRequested:
            console.print("[dim]Back to menu.[/dim]")
        except ValidationError as e:
            console_notify(str(e), ERROR)
        except KeyboardInterrupt:
            console.print("\n[dim]Use 'quit' to exit.[/dim]")
        except Exception as e:
            console.print(f"[red]Error: {e}[/red]")


if __name__ == "__main__":
    main()
