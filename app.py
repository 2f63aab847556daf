import streamlit as st
import asyncio
import logging

from checkpoints import filter_checkpoints
from config import load_settings, configure_logging
from controller import build_controller
from session import mastery_message, progress_percent, request_failed, running_score
from state import MasteryLevel, Screen

st.set_page_config(
    page_title="🌾 Rural Learning Assistant",
    page_icon="🌾",
    layout="centered",
    initial_sidebar_state="expanded"
)

logger = logging.getLogger(__name__)

st.markdown("""
<style>
.main-header { background: linear-gradient(135deg, #16a34a 0%, #2563eb 100%); padding: 2rem; border-radius: 0 0 25px 25px; color: white; text-align: center; }
.section-card { padding: 1.5rem; background: #ffffff; border-radius: 15px; border-left: 5px solid #16a34a; margin: 1rem 0; }
.feedback-good { background: rgba(16,185,129,0.1); padding: 1.2rem; border-radius: 12px; border-left: 4px solid #10b981; margin: 1rem 0; }
.feedback-wrong { background: rgba(239,68,68,0.1); padding: 1.2rem; border-radius: 12px; border-left: 4px solid #ef4444; margin: 1rem 0; }
</style>
""", unsafe_allow_html=True)

# 🔥 INITIALIZE PERSISTENT STATE
if 'controller' not in st.session_state:
    settings = load_settings()
    configure_logging(settings.log_level)
    st.session_state.controller = build_controller(settings)
if 'search_query' not in st.session_state:
    st.session_state.search_query = ""

controller = st.session_state.controller


def run_async_safe(coro):
    loop = asyncio.new_event_loop()
    try:
        return loop.run_until_complete(coro)
    except Exception as e:
        logger.exception("Session action failed")
        controller.state = request_failed(controller.state, f"⚠️ Error: {str(e)}")
    finally:
        loop.close()


def start_learning(topic):
    with st.spinner("Loading learning content..."):
        run_async_safe(controller.start_learning(topic))
    st.rerun()


def show_error():
    if controller.state.error:
        col1, col2 = st.columns([5, 1])
        with col1: st.error(controller.state.error)
        with col2:
            if st.button("✖", key="dismiss_error"):
                controller.dismiss_error(); st.rerun()


state = controller.state

# 🎨 HEADER
st.markdown('<div class="main-header"><h1>🌾 Rural Learning Assistant</h1></div>', unsafe_allow_html=True)

with st.sidebar:
    st.markdown("### 🕘 Continue Learning")
    if not state.recent_topics:
        st.caption("Topics you study will show up here.")
    for topic in state.recent_topics:
        if st.button(topic, key=f"recent_{topic}", use_container_width=True,
                     disabled=state.screen != Screen.TOPICS or state.loading):
            start_learning(topic)

# 🔥 TOPIC SELECTION
if state.screen == Screen.TOPICS:
    st.markdown("Learn complex concepts with simple explanations and rural examples")
    query = st.text_input("What do you want to learn today?", key="search_query",
                          placeholder="e.g., Photosynthesis, Fractions")
    if query.strip():
        if st.button(f"🔍 Learn \"{query.strip()}\"", key="learn_query", type="primary"):
            start_learning(query)

    show_error()

    st.markdown("## Search Results" if query else "## 🎯 Suggested Topics")
    matches = filter_checkpoints(query)
    if not matches:
        st.info("No topics found. Try a different search.")
    cols = st.columns(2)
    for i, cp in enumerate(matches):
        with cols[i % 2]:
            if st.button(f"{cp.name} · {cp.category}", key=f"topic_{cp.name}",
                         use_container_width=True, disabled=state.loading):
                start_learning(cp.name)

# 📖 EXPLANATION
elif state.screen == Screen.EXPLANATION:
    if st.button("⬅️ Back to Topics", key="back_to_topics"):
        controller.back_to_topics(); st.rerun()
    st.markdown(f"# {state.concept}")
    show_error()

    total = len(state.explanation_sections)
    for idx, section in enumerate(state.explanation_sections, start=1):
        st.markdown(f'<div class="section-card">', unsafe_allow_html=True)
        st.markdown(f"### Section {idx} of {total}: {section.title}")
        st.markdown(section.content)
        if section.example:
            st.markdown(f"**🌱 Example:** {section.example}")
        if section.visual_description:
            st.markdown(f"**👀 Picture it:** {section.visual_description}")
        st.markdown('</div>', unsafe_allow_html=True)

    if st.button("I'm Ready for the Quiz", key="start_quiz", type="primary",
                 use_container_width=True, disabled=state.loading):
        with st.spinner("Generating questions..."):
            run_async_safe(controller.start_quiz())
        st.rerun()

# 🎯 QUIZ
elif state.screen == Screen.QUIZ:
    question = state.current
    total = len(state.questions)
    col1, col2 = st.columns([3, 1])
    with col1: st.markdown(f"### Question {state.current_question + 1} of {total}")
    with col2: st.markdown(f"**Score: {running_score(state)}/{total}**")
    st.progress(progress_percent(state) / 100)
    show_error()

    st.caption(question.difficulty)
    st.markdown(f"#### {question.question_text}")
    for letter, text in question.options.items():
        is_selected = state.selection == letter
        if st.button(f"{letter}) {text}", key=f"opt_{state.current_question}_{letter}",
                     type="primary" if is_selected else "secondary", use_container_width=True,
                     disabled=state.feedback is not None or state.loading):
            controller.select_answer(letter); st.rerun()

    if state.feedback is None:
        if st.button("Submit Answer", key="submit_answer", type="primary", disabled=state.loading):
            with st.spinner("Checking your answer..."):
                run_async_safe(controller.submit_answer())
            st.rerun()
    else:
        fb = state.feedback
        css = "feedback-good" if fb.is_correct else "feedback-wrong"
        verdict = "✅ Correct!" if fb.is_correct else "❌ Not quite"
        st.markdown(f'<div class="{css}"><b>{verdict}</b><br/>{fb.feedback}</div>', unsafe_allow_html=True)
        label = "View Results" if state.is_last_question else "Next Question"
        if st.button(label, key="next_question", type="primary"):
            controller.next_question(); st.rerun()

# 🏆 RESULTS
elif state.screen == Screen.RESULTS:
    show_error()
    result = state.result
    if result is not None:
        col1, col2, col3 = st.columns(3)
        with col1: st.metric("Score", f"{result.score}/{result.total}")
        with col2: st.metric("Percent", f"{result.percentage}%")
        with col3: st.metric("Mastery", result.mastery_level.value)
        badge = {MasteryLevel.ADVANCED: st.success, MasteryLevel.INTERMEDIATE: st.info,
                 MasteryLevel.BEGINNER: st.warning}[result.mastery_level]
        badge(f"**{result.mastery_level.value} Level** · {mastery_message(result.mastery_level)}")

        st.markdown("## Your Answers")
        for answer in result.answers:
            css = "feedback-good" if answer.is_correct else "feedback-wrong"
            mark = "correct" if answer.is_correct else "wrong"
            st.markdown(f'<div class="{css}">Q{answer.question_number}: {answer.student_answer} ({mark})</div>',
                        unsafe_allow_html=True)

    col1, col2, col3 = st.columns(3)
    with col1:
        if st.button("📚 Learn Another Concept", key="learn_new", use_container_width=True,
                     disabled=state.loading):
            controller.learn_new_concept(); st.rerun()
    with col2:
        if st.button("🔄 Retake Quiz", key="retake_quiz", type="primary", use_container_width=True,
                     disabled=state.loading):
            with st.spinner("Generating questions..."):
                run_async_safe(controller.retake_quiz())
            st.rerun()
    with col3:
        if st.button("📖 Review Explanation", key="review_explanation", use_container_width=True):
            controller.review_explanation(); st.rerun()
