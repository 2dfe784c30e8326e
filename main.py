"""NightMind - Conversation & Journal Analytics Engine

Terminal front end for the engine:
- Chat with the companion (one Active conversation at a time)
- End a conversation to archive it with a summary, mood and tags
- Turn archived conversations into journal entries
- Log mood check-ins and review stats and insights

Run `nightmind --generate-key` once and put the key in NIGHTMIND_ENCRYPTION_KEY.
"""
import argparse
import logging
from typing import Optional

from agents.analysis_agent import AnalysisAgent
from agents.companion_agent import CompanionAgent
from config.settings import DATA_DIR, ENCRYPTION_KEY, LOG_LEVEL
from core.errors import ConfigurationError, NightMindError, ValidationError
from core.observability import configure_logging, get_metrics_summary
from models.journal import JournalEntry
from services.conversation_store import ConversationStore
from services.insight_generator import InsightGenerator
from services.journal_store import JournalStore
from services.persistence import EncryptedStore, FileStorage, StorageBackend

logger = logging.getLogger(__name__)

GREETING = """Hi, I'm NightMind. 🌙

I'm here for the late-night thoughts that won't settle.
Just type what's on your mind, or use a command:

  /new [anxiety 1-10]   start a fresh conversation
  /end [anxiety 1-10]   end and save this conversation
  /journal              turn the last conversation into a journal entry
  /mood <1-10> [notes]  log how you feel
  /stats                journal dashboard
  /insights             patterns NightMind has noticed
  /history              past conversations
  /quit                 leave"""


class NightMindSystem:
    """
    Wires the engine together from configuration.

    Both stores share one EncryptedStore but persist under separate keys,
    so either can be reset without touching the other.
    """

    def __init__(self, storage: Optional[EncryptedStore] = None,
                 completion_service=None, analysis_service=None):
        self.storage = storage
        self.conversations = ConversationStore(
            completion_service or CompanionAgent(),
            analysis_service or AnalysisAgent(),
            storage=storage,
        )
        self.journal = JournalStore(storage=storage, insight_generator=InsightGenerator())

    @classmethod
    def from_settings(cls, backend: Optional[StorageBackend] = None) -> "NightMindSystem":
        """Build against DATA_DIR with the configured encryption key."""
        storage = EncryptedStore(backend or FileStorage(DATA_DIR), ENCRYPTION_KEY)
        logger.info(f"Opened encrypted store at {DATA_DIR}")
        return cls(storage=storage)

    def journal_conversation(self, conversation_id: Optional[str] = None) -> JournalEntry:
        """Convert an archived conversation (the latest by default) into a journal entry."""
        if conversation_id:
            conversation = self.conversations.get_conversation(conversation_id)
        else:
            archived = self.conversations.list_conversations()
            if not archived:
                raise ValidationError("There are no saved conversations yet")
            conversation = archived[0]
        return self.journal.create_entry_from_conversation(conversation)

    def get_metrics(self) -> dict:
        return get_metrics_summary()


def _optional_level(args) -> Optional[int]:
    if not args:
        return None
    try:
        return int(args[0])
    except ValueError:
        raise ValidationError("Anxiety level must be a number between 1 and 10", field="anxiety_level") from None


def handle_command(system: NightMindSystem, line: str) -> Optional[str]:
    """Run one slash command and return the text to show."""
    command, *args = line.split()
    command = command.lower()

    if command == "/new":
        system.conversations.create_conversation(_optional_level(args))
        return "New conversation started. What's on your mind?"

    if command == "/end":
        result = system.conversations.end_conversation(_optional_level(args))
        if result is None:
            return "There's no conversation to end."
        lines = [f"Saved \"{result.conversation.title}\"."]
        if result.conversation.summary:
            lines.append(f"Summary: {result.conversation.summary}")
        if result.conversation.tags:
            lines.append(f"Topics: {', '.join(result.conversation.tags)}")
        if result.warning:
            lines.append(f"(Saved without analysis: {result.warning})")
        return "\n".join(lines)

    if command == "/journal":
        known = len(system.journal.insights)
        entry = system.journal_conversation()
        lines = [f"Journal entry created: {entry.title}", f"Mood {entry.mood}/10, anxiety {entry.anxiety_level}/10"]
        lines.extend(f"💡 {i.title}: {i.description}" for i in system.journal.insights[known:])
        return "\n".join(lines)

    if command == "/mood":
        if not args:
            return "Usage: /mood <1-10> [notes]"
        mood_entry = system.journal.add_mood_entry(args[0], notes=" ".join(args[1:]) or None)
        return f"Logged mood {mood_entry.mood}/10."

    if command == "/stats":
        stats = system.journal.get_stats()
        lines = [
            f"Entries: {stats.total_entries} ({stats.conversation_entries} from conversations, "
            f"{stats.manual_entries} written)",
            f"Mood check-ins: {stats.total_mood_entries}, average {stats.average_mood}",
            f"Insights: {stats.insights}",
        ]
        if stats.top_tags:
            lines.append("Top topics: " + ", ".join(f"{t['tag']} ({t['count']})" for t in stats.top_tags))
        for day in stats.mood_by_date:
            lines.append(f"  {day['date']}: {day['averageMood']:.1f}")
        return "\n".join(lines)

    if command == "/insights":
        insights = system.journal.list_insights() + system.conversations.theme_insights()
        if not insights:
            return "No patterns yet. Keep talking and journaling."
        return "\n".join(f"💡 [{i.type.value}] {i.title}: {i.description}" for i in insights)

    if command == "/history":
        archived = system.conversations.list_conversations(" ".join(args) or None)
        if not archived:
            return "No saved conversations."
        return "\n".join(
            f"{c.start_time:%Y-%m-%d %H:%M}  {c.title}  ({len(c.messages)} messages)"
            + (f"  [{', '.join(c.tags)}]" if c.tags else "")
            for c in archived
        )

    return f"Unknown command {command}. Try /new, /end, /journal, /mood, /stats, /insights, /history or /quit."


def chat_loop(system: NightMindSystem):
    print(f"NightMind: {GREETING}")

    while True:
        try:
            line = input("\nYou: ").strip()
        except (EOFError, KeyboardInterrupt):
            line = "/quit"
        if not line:
            continue
        if line.lower() in ("/quit", "exit", "quit"):
            print("NightMind: Rest well. I'm here whenever you need me.")
            break

        try:
            if line.startswith("/"):
                print(f"NightMind: {handle_command(system, line)}")
                continue

            if system.conversations.current_conversation is None:
                system.conversations.create_conversation()
            turn = system.conversations.add_message(line)
            if turn.warning and not turn.messages:
                print(f"NightMind: {turn.warning}. Type /new to start another one.")
                continue
            print(f"NightMind: {turn.reply.content}")
        except NightMindError as e:
            print(f"NightMind: {e.message}")


def main(argv=None):
    parser = argparse.ArgumentParser(prog="nightmind", description="NightMind late-night companion")
    parser.add_argument("--generate-key", action="store_true",
                        help="print a new encryption key for NIGHTMIND_ENCRYPTION_KEY and exit")
    args = parser.parse_args(argv)

    if args.generate_key:
        print(EncryptedStore.generate_key())
        return 0

    configure_logging(LOG_LEVEL)

    try:
        system = NightMindSystem.from_settings()
    except ConfigurationError as e:
        print(f"Error: {e.message}. Run `nightmind --generate-key` and set NIGHTMIND_ENCRYPTION_KEY.")
        return 1

    chat_loop(system)
    logger.info(f"Session metrics: {system.get_metrics()}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
