"""
Construction du texte de remplacement d'une observation masquée.
"""

from ...core.constants import CHARS_PER_TOKEN, MASKED_MARKER, SMART_TRUNCATION_TOKENS

# En dessous de ce multiple de la limite, masquer n'apporte rien.
MIN_MASKABLE_RATIO = 2.5


def count_lines(content: str) -> int:
    return content.count("\n") + 1


def format_size_mb(content: str) -> str:
    """Taille UTF-8 en MiB, deux décimales."""
    return f"{len(content.encode('utf-8')) / 1024 / 1024:.2f}"


def format_masked_snippet(
    content: str,
    file_path: str,
    tool_name: str,
    total_tokens: int,
    smart_truncation_tokens: int = SMART_TRUNCATION_TOKENS,
) -> str:
    """
    Conserve la tête et la queue de l'observation et ajoute un bloc de guidage.

    Troncature "intelligente": `smart_truncation_tokens` tokens en tête et en
    queue, avec un proxy de 4 caractères par token pour découper.

    Args:
        content: Texte complet de l'observation
        file_path: Fichier où le texte complet a été déchargé
        tool_name: Nom de l'outil
        total_tokens: Tokens estimés de l'observation complète
        smart_truncation_tokens: Tokens conservés de chaque côté

    Returns:
        Le texte de remplacement, ou `content` inchangé s'il est trop court
    """
    char_limit = smart_truncation_tokens * CHARS_PER_TOKEN

    if len(content) <= char_limit * MIN_MASKABLE_RATIO:
        return content

    total_lines = count_lines(content)
    file_size_mb = format_size_mb(content)
    head = content[:char_limit]
    tail = content[-char_limit:]

    return f"""{MASKED_MARKER}
{head}
... [TRUNCATED {total_lines:,} LINES | {file_size_mb}MB | ~{total_tokens:,} TOKENS] ...
{tail}

<observation_masked_guidance tool_name="{tool_name}">
  <summary>
    Data from tool "{tool_name}" was offloaded to save context space.
  </summary>
  <details>
    <file_path>{file_path}</file_path>
    <line_count>{total_lines:,}</line_count>
    <file_size>{file_size_mb}MB</file_size>
    <estimated_total_tokens>{total_tokens:,}</estimated_total_tokens>
  </details>
  <instructions>
    The full output is available at the path above.
    You can inspect it using tools like 'search_file_content' or 'read_file'.
    Note: Reading the full file will use approximately {total_tokens:,} tokens.
  </instructions>
</observation_masked_guidance>"""
