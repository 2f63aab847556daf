# run_agent.py - terminal front-end over the same session controller
import asyncio

from checkpoints import CHECKPOINTS
from config import load_settings, configure_logging
from controller import SessionController, build_controller
from session import mastery_message
from state import Screen


def show_error(controller):
    if controller.state.error:
        print(f"❌ {controller.state.error}")
        controller.dismiss_error()


def show_explanation(controller):
    state = controller.state
    total = len(state.explanation_sections)
    print("\n" + "=" * 60)
    for idx, section in enumerate(state.explanation_sections, start=1):
        print(f"📖 Section {idx} of {total}: {section.title}\n")
        print(section.content)
        if section.example:
            print(f"\n🌱 Example: {section.example}")
        if section.visual_description:
            print(f"👀 Picture it: {section.visual_description}")
        print("-" * 60)


async def take_quiz(controller):
    while controller.state.screen == Screen.QUIZ:
        state = controller.state
        question = state.current
        print(f"\n📝 Question {state.current_question + 1} of {len(state.questions)} [{question.difficulty}]")
        print(question.question_text)
        for letter, text in question.options.items():
            print(f"  {letter}) {text}")

        answer = input("\n💬 Your answer: ").strip().upper()
        if not answer:
            print("❌ Please select an answer")
            continue
        if not await controller.submit_answer(answer):
            show_error(controller)
            continue

        fb = controller.state.feedback
        print("✅ Correct!" if fb.is_correct else "❌ Not quite")
        print(fb.feedback)
        input("\n➡️ Press Enter to continue...")
        controller.next_question()


def show_results(controller):
    result = controller.state.result
    print("\n📊 QUIZ RESULTS:")
    print("=" * 50)
    for answer in result.answers:
        print(f"Q{answer.question_number}: {answer.student_answer}", "✅" if answer.is_correct else "❌")
    print(f"\nSCORE: {result.score}/{result.total} ({result.percentage}%)")
    print(f"🎯 {result.mastery_level.value} Level - {mastery_message(result.mastery_level)}")


async def main(controller: SessionController = None):
    if controller is None:
        settings = load_settings()
        configure_logging(settings.log_level)
        controller = build_controller(settings)

    print("🚀 Rural Learning Assistant - simple explanations, quick quizzes!")

    while True:
        state = controller.state
        print("\n📚 Suggested Topics:")
        for i, cp in enumerate(CHECKPOINTS, start=1):
            print(f"  {i}. {cp.name} ({cp.category})")
        if state.recent_topics:
            print(f"🕘 Continue learning: {', '.join(state.recent_topics)}")

        choice = input("\n🎯 Enter topic number or name (or 'exit'): ").strip()
        if choice.lower() == "exit":
            break
        if choice.isdigit():
            if int(choice) not in range(1, len(CHECKPOINTS) + 1):
                print("❌ Invalid choice. Try again.")
                continue
            choice = CHECKPOINTS[int(choice) - 1].name

        print(f"\n🔥 Learning: {choice}")
        if not await controller.start_learning(choice):
            show_error(controller)
            continue

        while controller.state.screen == Screen.EXPLANATION:
            show_explanation(controller)
            ready = input("\n🚀 Ready for the quiz? (y/n): ").lower()
            if ready != 'y':
                controller.back_to_topics()
                break
            if not await controller.start_quiz():
                show_error(controller)
                continue

            while controller.state.screen == Screen.QUIZ:
                await take_quiz(controller)
                show_results(controller)
                nxt = input("\n🔄 [r]etake quiz, re[v]iew explanation, or [n]ew concept: ").lower()
                if nxt == 'r':
                    if not await controller.retake_quiz():
                        show_error(controller)
                        controller.learn_new_concept()
                elif nxt == 'v':
                    controller.review_explanation()
                else:
                    controller.learn_new_concept()


if __name__ == "__main__":
    asyncio.run(main())
