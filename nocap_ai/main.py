"""Interactive console for running claims through the nocap-ai pipeline.

The HTTP service is started with:
    uvicorn nocap_ai.api.app:create_app --factory
"""

import asyncio

from .infrastructure.dependencies import ServiceContainer
from .infrastructure.settings import Settings


async def main():
    """Run the fact-check pipeline from the terminal."""
    print("nocap-ai - claim verification with decentralized broadcast")
    print("----------------------------------------------------------")

    container = ServiceContainer(Settings.from_env())
    await container.start()
    ingestion = container.ingestion_service

    try:
        while True:
            claim_text = input("\nEnter a claim to fact-check (or 'quit' to exit): ")
            if claim_text.lower() in ('quit', 'exit', 'q'):
                break

            source_url = input("Source URL (optional): ").strip() or None
            print("\nChecking claim...")
            try:
                receipt = await ingestion.submit(claim_text, source_url)
                print(f"Queued claim {receipt.id} ({receipt.cid})")

                # Verification and broadcast run on the worker pool
                await container.transition_queue.drain()
                claim = await ingestion.get_claim(receipt.id)

                print("\nResults:")
                print(f"Status: {claim.status.value}")
                print(f"CID: {claim.cid}")
                if claim.analysis_results:
                    print(f"Truth Score: {claim.analysis_results.truth_score}/100")
                    flags = ", ".join(claim.analysis_results.propaganda_flags) or "None detected"
                    print(f"Propaganda Flags: {flags}")
                    print(f"\nSummary: {claim.analysis_results.summary}")

            except Exception as e:
                print(f"\nError checking claim: {e}")

    finally:
        # Clean up
        await container.shutdown()


if __name__ == "__main__":
    asyncio.run(main())
