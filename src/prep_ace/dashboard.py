"""Progress dashboard summaries."""
from prep_ace.badges import BadgeEngine
from prep_ace.history import QuizHistory
from prep_ace.points import PointsLedger
from prep_ace.stats import StatsTracker
from prep_ace.streak import StreakTracker


def get_readiness_label(score: float) -> str:
    if score >= 80:
        return "READY"
    elif score >= 65:
        return "LIKELY"
    elif score >= 50:
        return "NEEDS WORK"
    return "NOT READY"


def get_readiness_color(score: float) -> str:
    if score >= 80:
        return "green"
    elif score >= 65:
        return "yellow"
    elif score >= 50:
        return "dark_orange"
    return "red"


def calc_average_accuracy(history: QuizHistory, last: int = 10) -> float:
    """Mean accuracy over the most recent attempts, as a percentage."""
    attempts = history.recent()[:last]
    if not attempts:
        return 0.0
    return round(sum(a.accuracy for a in attempts) / len(attempts), 1)


def get_topic_scores(history: QuizHistory) -> dict:
    """Accuracy per topic across all recorded attempts."""
    totals = {}
    for attempt in history.recent():
        correct, asked = totals.get(attempt.config.topic, (0, 0))
        totals[attempt.config.topic] = (correct + attempt.score, asked + attempt.total_questions)
    return {
        topic: round(correct / asked * 100, 1)
        for topic, (correct, asked) in totals.items() if asked
    }


def get_progress_summary(
    points: PointsLedger,
    stats: StatsTracker,
    streak: StreakTracker,
    badges: BadgeEngine,
    history: QuizHistory,
) -> dict:
    user_stats = stats.get()
    streak_state = streak.load()
    accuracy = calc_average_accuracy(history)
    earned = badges.get_earned()
    return {
        "points": points.get(),
        "quizzes_completed": user_stats.total_quizzes_completed,
        "unique_topics": len(user_stats.unique_quiz_topics_completed),
        "flashcard_sets": user_stats.total_flashcard_sets_generated,
        "current_streak": streak_state.current_streak,
        "daily_goal": streak_state.daily_goal,
        "goal_achieved_today": streak_state.goal_achieved_today,
        "badges_earned": len(earned),
        "badges_total": len(badges.definitions),
        "avg_accuracy": accuracy,
        "readiness": get_readiness_label(accuracy),
    }
