"""OpenAI Responses API client for narrative generation."""

from dataclasses import dataclass

from openai import AsyncOpenAI

from nutrition_insights.services.narrative import NarrativeClient


@dataclass
class OpenAINarrativeClient(NarrativeClient):
    """Narrative client backed by OpenAI Responses API."""

    client: AsyncOpenAI

    @classmethod
    def create(cls, api_key: str) -> "OpenAINarrativeClient":
        """Create an OpenAI narrative client."""
        return cls(client=AsyncOpenAI(api_key=api_key))

    async def generate(  # noqa: PLR0913
        self,
        *,
        model: str,
        store: bool,
        instructions: str,
        message: str,
        schema: dict[str, object] | None = None,
    ) -> str:
        """Call OpenAI Responses API, with structured output when a schema is set."""
        request_payload: dict[str, object] = {
            "model": model,
            "instructions": instructions,
            "input": message,
            "store": store,
        }
        if schema is not None:
            request_payload["text"] = {
                "format": {
                    "type": "json_schema",
                    "name": "daily_insights",
                    "strict": True,
                    "schema": schema,
                }
            }

        response = await self.client.responses.create(**request_payload)
        output_text = response.output_text
        if not output_text:
            raise RuntimeError("OpenAI returned an empty response")
        return output_text

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        await self.client.close()
