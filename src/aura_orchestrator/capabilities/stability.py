"""
aura_orchestrator.capabilities.stability

Image-synthesis client (Stability AI text-to-image).
"""

from __future__ import annotations

from typing import Any

from aura_orchestrator.capabilities.base import CapabilityClient, InvokeOptions, Result


class StabilityClient(CapabilityClient):
    provider = "stability"

    @property
    def base_url(self) -> str:
        return self._settings.stability_base_url.rstrip("/")

    @property
    def api_key(self) -> str | None:
        return self._settings.stability_api_key

    @property
    def default_model(self) -> str:
        return self._settings.stability_engine

    def _headers(self) -> dict[str, str]:
        return {**self._bearer(), "Accept": "application/json"}

    async def invoke(self, payload: Any, options: InvokeOptions | None = None) -> Result[Any]:
        if isinstance(payload, str):
            return await self.synthesize_image(payload)
        return self._unsupported("invoke with non-text prompt")

    async def synthesize_image(
        self,
        prompt: str,
        *,
        style: str = "photographic",
        width: int = 1024,
        height: int = 1024,
        steps: int = 30,
        samples: int = 1,
        cfg_scale: float = 7,
    ) -> Result[dict[str, Any]]:
        payload = {
            "text_prompts": [{"text": prompt, "weight": 1}],
            "cfg_scale": cfg_scale,
            "height": height,
            "width": width,
            "samples": samples,
            "steps": steps,
            "style_preset": style,
        }
        return await self._send(
            "POST",
            f"{self.base_url}/generation/{self.default_model}/text-to-image",
            json=payload,
            parse=_artifacts,
        )


def _artifacts(body: dict[str, Any]) -> dict[str, Any]:
    images = [
        {
            "base64": a["base64"],
            "seed": a.get("seed"),
            "finish_reason": a.get("finishReason"),
        }
        for a in body["artifacts"]
    ]
    return {"images": images}
