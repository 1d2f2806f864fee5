"""Code generation: hosted completion API with a template fallback."""

import re
from dataclasses import dataclass

import requests

from . import config, journal
from .config import DIM, GREEN, RESET, YELLOW
from .context import enrich
from .errors import GenerationError

# Checked in order, first hit wins
LANGUAGE_HINTS = {
    "javascript": ["javascript", "js", "node", "npm", "express", "react"],
    "python": ["python", "py", "django", "flask", "numpy", "pandas"],
    "html": ["html", "webpage", "website", "page", "web"],
    "css": ["css", "style", "styling", "stylesheet"],
    "bash": ["bash", "shell", "script", "sh", "terminal", "command"],
    "java": ["java", "spring", "android"],
}
DEFAULT_LANGUAGE = "javascript"

EXTENSIONS = {
    "javascript": ".js", "typescript": ".ts", "python": ".py", "html": ".html",
    "css": ".css", "java": ".java", "c++": ".cpp", "c": ".c", "rust": ".rs",
    "go": ".go", "ruby": ".rb", "php": ".php", "bash": ".sh",
}

COMMON_WORDS = {"a", "an", "the", "and", "or", "but", "for", "with", "create", "make", "build", "write"}

MODELS = [
    {"name": "CodeLlama-34b-Instruct", "description": "Large model for complex code generation", "size": "large"},
    {"name": "StarCoder-15b", "description": "Efficient model for most programming tasks", "size": "medium"},
    {"name": "Mistral-7b-Instruct", "description": "Fast model for simpler tasks", "size": "small"},
]

ATTRIBUTION = "Generated by codesphere"
FALLBACK_NOTE = "Fallback code generation used"
RESPONSE_SUMMARY = 200

SYSTEM_PROMPT = (
    "You are a code generator. Reply with {language} code only, "
    "no explanations and no surrounding prose."
)

TEMPLATES = {
    "javascript": '''/**
 * {description}
 * {attribution}
 */
function main() {{
  const result = {{ success: true, timestamp: new Date().toISOString() }};
  return result;
}}

module.exports = {{ main }};

if (require.main === module) {{
  console.log(main());
}}
''',
    "python": '''#!/usr/bin/env python3
"""
{description}
{attribution}
"""
import json
from datetime import datetime


def main():
    result = {{"success": True, "timestamp": datetime.now().isoformat()}}
    return result


if __name__ == "__main__":
    print(json.dumps(main(), indent=2))
''',
    "html": '''<!DOCTYPE html>
<html lang="en">
<head>
  <meta charset="UTF-8">
  <title>{description}</title>
</head>
<body>
  <h1>{description}</h1>
  <p>{attribution}</p>
</body>
</html>
''',
    "css": '''/*
 * {description}
 * {attribution}
 */
:root {{
  --primary-color: #3498db;
}}

body {{
  font-family: sans-serif;
  margin: 0;
}}
''',
    "bash": '''#!/bin/bash
# {description}
# {attribution}
set -e

log() {{
  echo "[$(date '+%Y-%m-%d %H:%M:%S')] $1"
}}

log "Starting"
''',
    "java": '''/**
 * {description}
 * {attribution}
 */
public class Main {{
    public static void main(String[] args) {{
        System.out.println("Starting process");
    }}
}}
''',
}


@dataclass(frozen=True)
class Generation:
    text: str
    model: str


def guess_language(text):
    text = text.lower()
    for language, keywords in LANGUAGE_HINTS.items():
        if any(k in text for k in keywords):
            return language
    return DEFAULT_LANGUAGE


def pick_model(prompt, language):
    """Label of the model tier suited to the request."""
    if language in ("python", "javascript"):
        return "CodeLlama-34b-Instruct" if len(prompt) > 500 else "StarCoder-15b"
    if language in ("java", "c++", "rust"):
        return "CodeLlama-34b-Instruct"
    if len(prompt) < 200:
        return "Mistral-7b-Instruct"
    return "StarCoder-15b"


def extract_keywords(prompt):
    words = prompt.lower().split()
    return [w for w in words if len(w) > 3 and w not in COMMON_WORDS][:5]


def function_name_for(prompt):
    words = [w for w in re.sub(r"[^\w\s]", "", prompt.lower()).split() if len(w) > 2]
    if not words:
        return "main"
    name = words[0] + "".join(w.capitalize() for w in words[1:3])
    return re.sub(r"[^a-zA-Z0-9]", "", name) or "main"


def template_for(language, description):
    template = TEMPLATES.get(language)
    if template is None:
        return f"// {description}\n\n// {ATTRIBUTION} for {language}\n"
    return template.format(description=description, attribution=ATTRIBUTION)


def enhance_template(language, prompt, model):
    code = template_for(language, prompt)
    name = function_name_for(prompt)
    if language == "javascript":
        code = code.replace("function main()", f"function {name}()")
        code = code.replace("{ main }", f"{{ {name} }}")
        code = code.replace("console.log(main())", f"console.log({name}())")
    elif language == "python":
        code = code.replace("def main()", f"def {name}()")
        code = code.replace("json.dumps(main()", f"json.dumps({name}()")

    keywords = extract_keywords(prompt)
    if keywords and language in ("javascript", "python"):
        prefix = "//" if language == "javascript" else "#"
        code = code.replace("\n", f"\n{prefix} Keywords: {', '.join(keywords)}\n", 1)
    return code.replace(ATTRIBUTION, f"Generated by {model}")


def call_completion_api(prompt, language):
    """Send the prompt to the hosted completion API and return the generated text."""
    try:
        r = requests.post(config.API_URL,
            headers={"Content-Type": "application/json", "Authorization": f"Bearer {config.API_KEY}"},
            json={
                "model": config.MODEL,
                "messages": [
                    {"role": "system", "content": SYSTEM_PROMPT.format(language=language)},
                    {"role": "user", "content": prompt},
                ],
                "temperature": config.TEMPERATURE,
                "max_tokens": config.MAX_TOKENS,
                "stream": False,
            },
            timeout=config.TIMEOUT,
        )
        r.raise_for_status()
    except requests.exceptions.Timeout as e:
        raise GenerationError(f"Request timed out after {config.TIMEOUT}s") from e
    except requests.exceptions.ConnectionError as e:
        raise GenerationError(f"Could not connect to API at {config.API_URL}") from e
    except requests.RequestException as e:
        raise GenerationError(f"API error: {e}") from e

    try:
        text = r.json()["choices"][0]["message"]["content"]
    except (ValueError, KeyError, IndexError, TypeError) as e:
        raise GenerationError("Unexpected response from completion API") from e
    if not text or not text.strip():
        raise GenerationError("Empty response from completion API")
    return strip_fences(text)


def strip_fences(text):
    # Models tend to wrap code in ```lang ... ``` even when told not to
    m = re.search(r"```[^\n]*\n(.*?)```", text, re.DOTALL)
    return m.group(1) if m else text.strip()


def generate(prompt, language):
    """Turn an (enriched) prompt into code.

    Uses the completion API when a key is configured, templates otherwise.
    Raises GenerationError if the API call fails.
    """
    if config.api_enabled():
        print(f"{DIM}[Connecting to {config.MODEL}...]{RESET}")
        return Generation(text=call_completion_api(prompt, language), model=config.MODEL)

    model = pick_model(prompt, language)
    print(f"{DIM}Using template-based generation as fallback{RESET}")
    return Generation(text=enhance_template(language, prompt, model), model=f"{model} (template fallback)")


def has_header_comment(text):
    return text.strip().startswith(("/**", "/*", '"""', "#"))


def header_comment(description, language, model):
    if language == "python":
        return f'"""\nGenerated for: {description}\nModel: {model}\n"""\n\n'
    return f"/**\n * Generated for: {description}\n * Model: {model}\n */\n\n"


def generate_code(description, memory, language=None):
    """Generate code for a request and record the exchange in ``memory``."""
    language = language or guess_language(description)
    prompt = enrich(description, memory)
    try:
        result = generate(prompt, language)
    except GenerationError as e:
        print(f"{YELLOW}Warning:{RESET} Model generation failed, using offline generator")
        journal.log_interaction("error", str(e))
        code = (
            f"/*\n * {description}\n *\n * Note: Code generation failed with error: {e}\n"
            f" * Using offline code generator instead.\n */\n"
            + template_for(language, description).replace(ATTRIBUTION, "Generated offline (model unavailable)")
        )
        memory.record_exchange(description, FALLBACK_NOTE)
        return code

    code = result.text
    if not has_header_comment(code):
        code = header_comment(description, language, result.model) + code
    memory.record_exchange(description, code[:RESPONSE_SUMMARY] + "...")
    return code


def suggest_filename(description, language):
    slug = re.sub(r"[^a-z0-9]+", "-", description.lower()).strip("-")[:20]
    return slug + EXTENSIONS.get(language, ".txt")


def model_status_lines():
    tag = f"{GREEN}[api]{RESET}" if config.api_enabled() else f"{YELLOW}[template fallback]{RESET}"
    lines = [f"Active: {config.MODEL} {tag}", ""]
    for m in MODELS:
        lines.append(f"{GREEN}{m['name']}{RESET}\n  {m['description']}\n  Size: {m['size']}")
    return "\n".join(lines)
