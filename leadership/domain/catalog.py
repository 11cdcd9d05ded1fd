"""
Static questionnaire catalog: five leadership dimensions, four questions each.

Loaded once at import and passed explicitly to the scoring and
recommendation functions.
"""

from __future__ import annotations

from .models import Dimension, Question

DIMENSIONS: tuple[Dimension, ...] = (
    Dimension(
        id="raising_expectations",
        name="Raising Expectations & Rapid Experimentation",
        description=(
            "Ability to set higher standards, challenge the status quo, and promote rapid "
            "experimentation to unlock hidden potential."
        ),
        short_description="Setting higher standards and promoting experimentation",
        resources=(
            'Book: "Amp It Up" by Frank Slootman, chapter on Raising Expectations',
            'Book: "The Geek Way" by Andrew McAfee, sections on rapid experimentation',
            "Practice: Define ambitious goals that challenge your team while encouraging experimentation",
            "Exercise: Identify areas where rapid prototyping can exceed current performance",
            'Article: "Setting Standards in High-Performance Teams" - Harvard Business Review',
        ),
    ),
    Dimension(
        id="increasing_urgency",
        name="Increasing Urgency & Speed",
        description=(
            "Ability to accelerate decision-making and execution speed through rapid iteration "
            "cycles, creating momentum and driving faster results."
        ),
        short_description="Accelerating decision-making and execution cycles",
        resources=(
            'Book: "Amp It Up" by Frank Slootman, chapter on Speed as Competitive Advantage',
            'Book: "The Geek Way" by Andrew McAfee, sections on iteration velocity',
            "Practice: Implement shorter, more effective decision cycles",
            "Exercise: Identify and eliminate bureaucratic obstacles that slow execution",
            'Webinar: "Speed as a Competitive Advantage in Modern Organizations"',
            'Case Study: "How Rapid Iteration Cycles Transform Organizations"',
        ),
    ),
    Dimension(
        id="intensifying_commitment",
        name="Intensifying Commitment & Cost-Effective Innovation",
        description=(
            "Ability to generate higher levels of energy, focus, and determination while driving "
            "cost-effective innovation across all levels of the organization."
        ),
        short_description="Generating energy, focus, and cost-effective innovation",
        resources=(
            'Book: "Amp It Up" by Frank Slootman, chapter on Intensifying Commitment',
            'Book: "The Geek Way" by Andrew McAfee, sections on cost-effective innovation',
            "Practice: Connect daily work to meaningful purposes and clear deadlines",
            "Exercise: Develop team rituals that maintain intensity while promoting innovation",
            'Case Study: "Building Commitment in High-Performance Innovation Teams"',
            'Workshop: "Elevating Energy Levels While Optimizing Resources"',
        ),
    ),
    Dimension(
        id="transforming_conversations",
        name="Transforming Conversations & Challenging Established Practices",
        description=(
            "Ability to promote more intellectually intense discussions that question the status "
            "quo, challenge thinking, and drive innovation."
        ),
        short_description="Promoting intense discussions that challenge practices",
        resources=(
            'Book: "Amp It Up" by Frank Slootman, chapter on Transforming Conversations',
            'Book: "The Geek Way" by Andrew McAfee, sections on challenging established practices',
            "Practice: Implement Socratic questioning techniques in collaborative sessions",
            "Exercise: Train your team in constructive debate and intellectual collaboration skills",
            'Workshop: "Effective Communication in High-Performance Organizations"',
            'Article: "The Power of Productive Debate and Challenging Assumptions"',
        ),
    ),
    Dimension(
        id="data_driven_leadership",
        name="Data-Driven Leadership & Leveraging Technology",
        description=(
            "Ability to use data and commercial technology to guide decision-making and drive "
            "innovation, creating a culture of evidence-based leadership."
        ),
        short_description="Using data and technology to guide decisions",
        resources=(
            'Book: "Amp It Up" by Frank Slootman, chapter on Data, Decisions, and Direction',
            'Book: "The Geek Way" by Andrew McAfee, sections on leveraging commercial technology',
            "Practice: Establish key metrics dashboards that drive performance",
            "Exercise: Develop the ability to interpret data and extract actionable insights",
            'Online Course: "Data-Driven Leadership in the Digital Age"',
            'Case Study: "How Leading Organizations Leverage Technology for Innovation"',
        ),
    ),
)


QUESTIONS: tuple[Question, ...] = (
    # Raising Expectations & Rapid Experimentation
    Question(
        "q1_1",
        "Do I set higher standards that challenge my team to exceed their current performance levels?",
        "raising_expectations",
        "Raising Expectations: Setting ambitious goals that challenge the organization",
    ),
    Question(
        "q1_2",
        "Do I encourage my team to challenge the status quo through rapid experimentation?",
        "raising_expectations",
        "The Geek Way: Promoting rapid experimentation to discover breakthroughs",
    ),
    Question(
        "q1_3",
        "Do I create an environment where failure is seen as a learning opportunity in the "
        "pursuit of excellence?",
        "raising_expectations",
        "The Geek Way: Embracing productive failure as part of the innovation process",
    ),
    Question(
        "q1_4",
        "Do I identify and unlock hidden potential in my team through high standards and clear "
        "expectations?",
        "raising_expectations",
        "Amp It Up: Uncovering untapped capabilities through elevated standards",
    ),
    # Increasing Urgency & Speed
    Question(
        "q2_1",
        "Do I create a sense of urgency that drives my team to make decisions and execute quickly?",
        "increasing_urgency",
        "Amp It Up: Generating momentum for immediate action",
    ),
    Question(
        "q2_2",
        "Do I implement rapid iteration cycles that accelerate learning and improvement?",
        "increasing_urgency",
        "The Geek Way: Using rapid iterations to accelerate development and innovation",
    ),
    Question(
        "q2_3",
        "Do I eliminate bureaucratic obstacles that slow down decision-making and execution?",
        "increasing_urgency",
        "Amp It Up: Removing barriers to rapid action",
    ),
    Question(
        "q2_4",
        "Do I prioritize speed as a competitive advantage in my leadership approach?",
        "increasing_urgency",
        "Amp It Up & The Geek Way: Treating speed as a critical competitive differentiator",
    ),
    # Intensifying Commitment & Cost-Effective Innovation
    Question(
        "q3_1",
        "Do I generate higher levels of energy and focus to accelerate results?",
        "intensifying_commitment",
        "Amp It Up: Elevating collective energy for faster execution",
    ),
    Question(
        "q3_2",
        "Do I promote cost-effective innovation that maximizes impact with minimal resources?",
        "intensifying_commitment",
        "The Geek Way: Driving innovation with resource efficiency",
    ),
    Question(
        "q3_3",
        "Do I maintain intensity and focus on outcomes even during difficult or complex projects?",
        "intensifying_commitment",
        "Amp It Up: Maintaining determination when facing obstacles",
    ),
    Question(
        "q3_4",
        "Do I encourage teams to find innovative solutions that deliver more value at lower cost?",
        "intensifying_commitment",
        "The Geek Way: Pursuing innovation that optimizes resource utilization",
    ),
    # Transforming Conversations & Challenging Established Practices
    Question(
        "q4_1",
        "Do I promote intellectually intense discussions that challenge conventional thinking?",
        "transforming_conversations",
        "Amp It Up: Elevating dialogue quality through intellectual challenge",
    ),
    Question(
        "q4_2",
        "Do I ask probing questions that challenge assumptions and established practices?",
        "transforming_conversations",
        "The Geek Way & Amp It Up: Using questioning to challenge the status quo",
    ),
    Question(
        "q4_3",
        "Do I facilitate productive debates that lead to better decisions and innovative solutions?",
        "transforming_conversations",
        "Amp It Up: Converting debate into action and innovation",
    ),
    Question(
        "q4_4",
        "Do I create collaborative environments where challenging established practices is "
        "encouraged?",
        "transforming_conversations",
        "The Geek Way: Building a culture that questions established norms",
    ),
    # Data-Driven Leadership & Leveraging Technology
    Question(
        "q5_1",
        "Do I use data to inform strategic decisions and drive organizational performance?",
        "data_driven_leadership",
        "Amp It Up: Using evidence to guide strategic direction",
    ),
    Question(
        "q5_2",
        "Do I effectively leverage commercial technology to drive innovation and competitive "
        "advantage?",
        "data_driven_leadership",
        "The Geek Way: Adopting and adapting commercial technology for innovation",
    ),
    Question(
        "q5_3",
        "Do I promote a culture where data is used to learn, improve, and innovate?",
        "data_driven_leadership",
        "Amp It Up: Creating a data-informed culture",
    ),
    Question(
        "q5_4",
        "Do I use technology and data to identify opportunities for innovation and competitive "
        "advantage?",
        "data_driven_leadership",
        "The Geek Way & Amp It Up: Leveraging data and technology to uncover new opportunities",
    ),
)


def get_dimension(dimension_id: str) -> Dimension | None:
    return next((d for d in DIMENSIONS if d.id == dimension_id), None)


def questions_for(dimension_id: str, questions: tuple[Question, ...] = QUESTIONS) -> list[Question]:
    return [q for q in questions if q.dimension_id == dimension_id]


def question_dimension_map(questions: tuple[Question, ...] = QUESTIONS) -> dict[str, str]:
    """question id -> dimension id."""
    return {q.id: q.dimension_id for q in questions}
