from __future__ import annotations
from dataclasses import dataclass, field
import json
import os
from typing import Any, Dict, List

import requests

_TRUE = {"1", "true", "True", "yes", "Y"}


@dataclass
class LLMConfig:
    """OpenAI-compatible endpoint settings, read from AIC_LLM_* variables.

    requests honours HTTP(S)_PROXY from the environment by default; trust_env is
    turned off unless AIC_LLM_DISABLE_ENV_PROXY=0, so internal gateways are not
    routed through a local proxy.
    """
    base_url: str = field(default_factory=lambda: os.getenv("AIC_LLM_BASE_URL", "https://api.openai.com/v1"))
    api_key: str = field(default_factory=lambda: os.getenv("AIC_LLM_API_KEY", ""))
    model: str = field(default_factory=lambda: os.getenv("AIC_LLM_MODEL", "gpt-4.1-mini"))
    temperature: float = field(default_factory=lambda: float(os.getenv("AIC_LLM_TEMPERATURE", "0.2")))
    timeout_s: int = field(default_factory=lambda: int(os.getenv("AIC_LLM_TIMEOUT_S", "60")))
    max_output_tokens: int = field(default_factory=lambda: int(os.getenv("AIC_LLM_MAX_TOKENS", "2048")))
    disable_env_proxy: bool = field(default_factory=lambda: os.getenv("AIC_LLM_DISABLE_ENV_PROXY", "1") in _TRUE)


class OpenAIChatClient:
    def __init__(self, cfg: LLMConfig):
        self.cfg = cfg
        self.session = requests.Session()
        if cfg.disable_env_proxy:
            self.session.trust_env = False

    def _post(self, path: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        if not self.cfg.api_key:
            raise RuntimeError("Missing API key: set AIC_LLM_API_KEY")
        url = self.cfg.base_url.rstrip("/") + path
        headers = {"Authorization": f"Bearer {self.cfg.api_key}", "Content-Type": "application/json"}
        r = self.session.post(url, headers=headers, json=payload, timeout=self.cfg.timeout_s)
        r.raise_for_status()
        return r.json()

    def chat_text(self, system: str, user: str) -> str:
        messages: List[Dict[str, str]] = [
            {"role": "system", "content": system},
            {"role": "user", "content": user},
        ]
        payload = {
            "model": self.cfg.model,
            "temperature": self.cfg.temperature,
            "messages": messages,
            "max_tokens": self.cfg.max_output_tokens,
        }
        data = self._post("/chat/completions", payload)
        return data["choices"][0]["message"]["content"]


def extract_first_json_object(text: str) -> Dict[str, Any]:
    """Best-effort extraction of the first JSON object from a chatty response.

    Braces inside JSON strings are skipped, so `{"a": "}"}` parses correctly.
    """
    text = text.strip()
    if not text:
        raise ValueError("Empty response")
    try:
        obj = json.loads(text)
        if isinstance(obj, dict):
            return obj
    except json.JSONDecodeError:
        pass

    start = text.find("{")
    if start < 0:
        raise ValueError("No '{' found in response")
    depth = 0
    in_str = False
    escaped = False
    for i in range(start, len(text)):
        c = text[i]
        if in_str:
            if escaped:
                escaped = False
            elif c == "\\":
                escaped = True
            elif c == '"':
                in_str = False
            continue
        if c == '"':
            in_str = True
        elif c == "{":
            depth += 1
        elif c == "}":
            depth -= 1
            if depth == 0:
                chunk = text[start:i + 1]
                try:
                    obj = json.loads(chunk)
                except json.JSONDecodeError as e:
                    raise ValueError(f"Failed to parse JSON chunk: {e}. Chunk head: {chunk[:200]}") from e
                if not isinstance(obj, dict):
                    raise ValueError("Extracted JSON is not an object")
                return obj
    raise ValueError("Unclosed JSON object in response")
