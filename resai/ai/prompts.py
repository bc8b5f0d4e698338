from __future__ import annotations

import json
from typing import Any

from resai.ai.types import ChatMessage

TAILOR_JOB_CHARS = 500
COVER_LETTER_JOB_CHARS = 400
COVER_LETTER_EXPERIENCES = 2
COVER_LETTER_SKILLS = 8

_TAILOR_RESUME_KEYS = ("fullName", "professionalSummary", "experience", "skills", "education")


def normalize_language(language: str | None) -> str:
    return "fr" if (language or "").strip().lower() == "fr" else "en"


def language_name(language: str | None) -> str:
    return "French" if normalize_language(language) == "fr" else "English"


def _truncate(text: str, limit: int) -> str:
    text = (text or "").strip()
    if len(text) > limit:
        return text[:limit] + "..."
    return text


def summary_messages(user_input: str, language: str | None) -> list[ChatMessage]:
    if normalize_language(language) == "fr":
        system = (
            "Tu es un rédacteur de CV professionnel. "
            "Génère un résumé professionnel concis et optimisé pour les ATS (2-3 phrases, environ 50-80 mots) "
            "à partir de la description de l'utilisateur. "
            "Mets en avant le rôle, les années d'expérience, les compétences clés et la valeur apportée. "
            "N'invente aucune information. "
            "Retourne UNIQUEMENT le texte du résumé, sans titre ni guillemets."
        )
    else:
        system = (
            "You are a professional resume writer. "
            "Generate a concise, ATS-friendly professional summary (2-3 sentences, about 50-80 words) "
            "based on the user's description. "
            "Highlight role, years of experience, key skills and the value delivered. "
            "Do not invent information. "
            "Return ONLY the summary text, without headings or quotes."
        )
    return [ChatMessage(role="system", content=system), ChatMessage(role="user", content=user_input)]


def experience_bullet_messages(user_input: str, context: dict[str, str] | None, language: str | None) -> list[ChatMessage]:
    context = context or {}
    role = context.get("role", "")
    company = context.get("company", "")
    if normalize_language(language) == "fr":
        system = (
            "Tu es un rédacteur de CV professionnel. "
            "Transforme la description de l'utilisateur en 3 à 5 puces d'expérience percutantes. "
            "Commence chaque puce par un verbe d'action, quantifie les résultats quand ils sont fournis, "
            "et n'invente aucun chiffre ni technologie. "
            f"Poste : {role}\nEntreprise : {company}\n"
            "Retourne UNIQUEMENT les puces, une par ligne, chacune commençant par '• '."
        )
    else:
        system = (
            "You are a professional resume writer. "
            "Turn the user's description into 3-5 impactful experience bullet points. "
            "Start each bullet with an action verb, quantify results when they are provided, "
            "and never invent numbers or technologies. "
            f"Role: {role}\nCompany: {company}\n"
            "Return ONLY the bullets, one per line, each starting with '• '."
        )
    return [ChatMessage(role="system", content=system), ChatMessage(role="user", content=user_input)]


def project_bullet_messages(user_input: str, context: dict[str, str] | None, language: str | None) -> list[ChatMessage]:
    project_title = (context or {}).get("projectTitle", "")
    if normalize_language(language) == "fr":
        system = (
            "Tu es un rédacteur de CV professionnel. "
            "Transforme la description du projet en 2 à 4 puces concises. "
            "Mentionne les technologies utilisées et l'impact, sans rien inventer. "
            f"Projet : {project_title}\n"
            "Retourne UNIQUEMENT les puces, une par ligne, chacune commençant par '• '."
        )
    else:
        system = (
            "You are a professional resume writer. "
            "Turn the project description into 2-4 concise bullet points. "
            "Mention the technologies used and the impact, without inventing anything. "
            f"Project: {project_title}\n"
            "Return ONLY the bullets, one per line, each starting with '• '."
        )
    return [ChatMessage(role="system", content=system), ChatMessage(role="user", content=user_input)]


def tailoring_messages(resume_data: dict[str, Any], job_description: str, language: str | None) -> list[ChatMessage]:
    compact = {key: resume_data.get(key) for key in _TAILOR_RESUME_KEYS}
    resume_json = json.dumps(compact, ensure_ascii=False, default=str)
    prompt = (
        "Tailor this resume for the job. CRITICAL RULES:\n"
        f"1. OUTPUT LANGUAGE: Write ALL content in {language_name(language)}\n"
        "2. NO FABRICATION: Only use existing skills/experience from the resume\n"
        "3. NEVER ADD: Don't add skills, technologies, or achievements not in the resume\n"
        "4. HIGHLIGHT: Emphasize relevant existing content that matches the job\n"
        "5. REORDER: Prioritize matching skills, but don't invent new ones\n"
        "6. REWRITE: Improve bullet points to show relevance to job requirements\n\n"
        f"RESUME:\n{resume_json}\n\n"
        f"JOB (key requirements):\n{_truncate(job_description, TAILOR_JOB_CHARS)}\n\n"
        "Return ONLY valid JSON with the same structure (allowed keys: fullName, professionalSummary, "
        "experience, skills, education, projects, languages, certificates, title, location, website, "
        "github, linkedin).\n"
        "No markdown, no explanations, no code blocks."
    )
    return [ChatMessage(role="user", content=prompt)]


def _text(value: Any, default: str = "") -> str:
    return default if value is None else str(value)


def brief_experience(resume_data: dict[str, Any], limit: int = COVER_LETTER_EXPERIENCES) -> str:
    experiences = resume_data.get("experience")
    if not isinstance(experiences, list) or not experiences:
        return "See resume"
    parts = []
    for entry in experiences[:limit]:
        if isinstance(entry, dict):
            parts.append(f"{_text(entry.get('position'))} at {_text(entry.get('company'))}")
        else:
            parts.append(_text(entry))
    return "; ".join(parts)


def top_skills(resume_data: dict[str, Any], limit: int = COVER_LETTER_SKILLS) -> str:
    skills = resume_data.get("skills")
    if not isinstance(skills, list) or not skills:
        return "See resume"
    collected: list[str] = []
    for entry in skills:
        if isinstance(entry, dict):
            items = entry.get("items")
            if isinstance(items, list) and items:
                for item in items:
                    collected.append(_text(item))
                    if len(collected) >= limit:
                        break
            elif entry.get("name") is not None:
                collected.append(_text(entry.get("name")))
        elif entry is not None:
            collected.append(_text(entry))
        if len(collected) >= limit:
            break
    return ", ".join(collected[:limit]) or "See resume"


def cover_letter_messages(resume_data: dict[str, Any], job_description: str, language: str | None) -> list[ChatMessage]:
    full_name = _text(resume_data.get("fullName"), "Candidate") or "Candidate"
    summary = _text(resume_data.get("professionalSummary"))
    lang = language_name(language)
    prompt = (
        f"Write a cover letter in {lang} (250 words max).\n\n"
        f"Candidate: {full_name}\n"
        f"Summary: {summary}\n"
        f"Experience: {brief_experience(resume_data)}\n"
        f"Skills: {top_skills(resume_data)}\n\n"
        f"Job:\n{_truncate(job_description, COVER_LETTER_JOB_CHARS)}\n\n"
        "Format:\n"
        "Dear Hiring Manager,\n"
        "[3 paragraphs: intro + relevant experience + closing]\n"
        "Sincerely,\n"
        f"{full_name}\n\n"
        f"Keep it concise, professional, specific. Write ENTIRELY in {lang}."
    )
    return [ChatMessage(role="user", content=prompt)]
