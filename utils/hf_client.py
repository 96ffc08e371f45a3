import os
import time
from typing import Optional
from huggingface_hub import InferenceClient

class HFClient:
    def __init__(self, token: Optional[str] = None, timeout: Optional[float] = None):
        self.token = token or os.environ.get("HF_TOKEN")
        if not self.token:
            raise ValueError("HF_TOKEN environment variable is not set.")
        self.timeout = timeout
        self.client = InferenceClient(token=self.token, timeout=timeout)

    def chat_completion(
        self,
        model: str,
        system_prompt: str,
        user_prompt: str,
        max_tokens: int = 2048,
        temperature: float = 0.7,
        max_retries: int = 3,
    ) -> str:
        messages = [
            {"role": "system", "content": system_prompt},
            {"role": "user", "content": user_prompt}
        ]

        for attempt in range(max_retries):
            try:
                response = self.client.chat_completion(
                    model=model,
                    messages=messages,
                    max_tokens=max_tokens,
                    temperature=temperature
                )
                content = response.choices[0].message.content
                if not content:
                    raise ValueError("Empty completion")
                return content.strip()
            except Exception as e:
                if attempt == max_retries - 1:
                    raise RuntimeError(f"Failed to get response after {max_retries} attempts: {e}")
                time.sleep(2 ** attempt)  # Exponential backoff

def get_hf_client(timeout: Optional[float] = None) -> HFClient:
    return HFClient(timeout=timeout)
