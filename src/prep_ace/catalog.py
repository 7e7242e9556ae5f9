"""RRB NTPC syllabus: subjects and their topics."""

SUBJECT_TOPICS = {
    "Mathematics": [
        "Number System", "Decimals", "Fractions", "LCM and HCF", "Ratio and Proportion",
        "Percentage", "Mensuration", "Time and Work", "Time and Distance",
        "Simple and Compound Interest", "Profit and Loss", "Elementary Algebra",
        "Geometry and Trigonometry", "Elementary Statistics",
    ],
    "General Intelligence and Reasoning": [
        "Analogies", "Completion of Number and Alphabetical Series", "Coding and Decoding",
        "Mathematical Operations", "Similarities and Differences", "Relationships",
        "Analytical Reasoning", "Syllogism", "Jumbling", "Venn Diagrams",
        "Puzzle", "Data Sufficiency", "Statement-Conclusion", "Statement-Courses of Action",
        "Decision Making", "Maps", "Interpretation of Graphs",
    ],
    "General Awareness": [
        "Current Events of National and International Importance", "Games and Sports",
        "Art and Culture of India", "Indian Literature", "Monuments and Places of India",
        "General Science and Life Science (up to 10th CBSE)",
        "History of India and Freedom Struggle",
        "Physical, Social and Economic Geography of India and World",
        "Indian Polity and Governance - Constitution and Political System",
        "General Scientific and Technological Developments including Space and Nuclear Program of India",
        "UN and Other important World Organizations",
        "Environmental Issues Concerning India and World at Large",
        "Basics of Computers and Computer Applications", "Common Abbreviations",
        "Transport Systems in India", "Indian Economy", "Famous Personalities of India and World",
        "Flagship Government Programs", "Flora and Fauna of India",
        "Important Government and Public Sector Organizations of India",
    ],
}


def get_subjects() -> list[str]:
    return list(SUBJECT_TOPICS)


def get_topics(subject: str) -> list[str]:
    return list(SUBJECT_TOPICS.get(subject, []))
