#!/usr/bin/env python3
"""Example: Memory Across Conversation Turns

Demonstrates how the coordinator wraps each turn of a financial assistant.

This example shows:
- Saving assistant replies as conversation memories
- Recalling relevant memories as a system context message on a later turn
- Duplicate messages collapsing before the reply is generated
- Registered users going to the durable store, guests to the ephemeral one

Requires a local Ollama with an embedding model:
    ollama pull nomic-embed-text

Usage:
    python examples/memory_turns.py
"""

import asyncio

from finrecall.config.schema import (
    EmbeddingsConfig,
    FinrecallConfig,
    PersistentStoreConfig,
)
from finrecall.memory import ConversationMemoryCoordinator, ConversationState
from finrecall.memory.factory import create_coordinator
from finrecall.memory.messages import ChatMessage


def show(state: ConversationState) -> None:
    for message in state.messages:
        content = message.content.replace("\n", " | ")
        print(f"  [{message.role}] {content}")
    print()


async def run_user(coordinator: ConversationMemoryCoordinator, user_id: str, registered: bool):
    label = "registered" if registered else "guest"
    print(f"User {user_id} ({label})")
    print("-" * 60)

    # Turn 1: the assistant states a fact worth remembering
    state = ConversationState(
        user_id=user_id,
        thread_id=f"{user_id}-thread",
        is_registered=registered,
        last_routing_step="budget_agent",
    )
    state.messages.append(ChatMessage("user", "Set my grocery budget to 400 a month"))
    await coordinator.process_state_with_memory(state, "Set my grocery budget to 400 a month")
    state.messages.append(ChatMessage("assistant", "Your monthly grocery budget is now 400"))
    await coordinator.save_ai_message_to_memory(state)
    show(state)

    # Turn 2: a new thread asks about it; the repeated message collapses
    question = "What is my monthly grocery budget?"
    state = ConversationState(
        user_id=user_id, thread_id=f"{user_id}-later", is_registered=registered
    )
    state.messages.extend([ChatMessage("user", question), ChatMessage("user", question)])
    await coordinator.process_state_with_memory(state, question)
    show(state)

    if state.memory_context:
        print(f"  memory used at {state.memory_context.last_interaction:%X}")
    else:
        print("  nothing relevant enough was recalled")
    print()


async def main():
    """Run memory turns example."""
    print("=" * 60)
    print("finrecall Memory Example")
    print("=" * 60)
    print()

    config = FinrecallConfig(
        embeddings=EmbeddingsConfig(provider="ollama", model="nomic-embed-text"),
        # Embedded in-memory ChromaDB instead of a server
        persistent=PersistentStoreConfig(host=None),
    )
    coordinator = create_coordinator(config)

    await run_user(coordinator, "alice", registered=True)
    await run_user(coordinator, "guest-42", registered=False)

    alice = await coordinator.manager.get_user_memories("alice", is_registered=True)
    print(f"Durable memories for alice: {len(alice)}")


if __name__ == "__main__":
    asyncio.run(main())
