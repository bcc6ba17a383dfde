# scripts/smoke_providers.py
import asyncio
import os
from pathlib import Path

from dotenv import load_dotenv

# Resolve .env relative to the repo root so this script works from any cwd.
load_dotenv(Path(__file__).parent.parent / ".env", override=True)

from promptgateway.config import Settings  # noqa: E402
from promptgateway.providers import LLMInvoker, Provider  # noqa: E402

PROVIDERS_TO_TEST = [
    {"name": "OpenAI", "provider": Provider.OPENAI, "required_env": "OPENAI_API_KEY"},
    {"name": "Anthropic", "provider": Provider.ANTHROPIC, "required_env": "ANTHROPIC_API_KEY"},
    {"name": "Gemini", "provider": Provider.GEMINI, "required_env": "GEMINI_API_KEY"},
]


async def check_provider(invoker: LLMInvoker, provider_info: dict):
    """Send one prompt to a single provider's default model"""

    if not os.getenv(provider_info["required_env"]):
        print(f"Skipping {provider_info['name']} (no API key)")
        return

    provider = provider_info["provider"]
    print(f"\nTesting {provider_info['name']} ({invoker.default_model(provider)})...")

    try:
        response = await invoker.invoke(
            [], "Say 'Hello from the gateway!' in one sentence.", provider
        )
        print(f"   Response: {response.text}")
        print(f"   Tokens: {response.usage}  Cost: {response.cost}")
        print(f"   OK: {provider_info['name']} working!")

    except Exception as e:
        print(f"   Error: {type(e).__name__}: {e}")


async def main():
    print("=" * 60)
    print("Provider smoke test")
    print("=" * 60)

    invoker = LLMInvoker.from_settings(Settings())
    for provider_info in PROVIDERS_TO_TEST:
        await check_provider(invoker, provider_info)

    print("\n" + "=" * 60)
    print("Done")
    print("=" * 60)


if __name__ == "__main__":
    asyncio.run(main())
