from __future__ import annotations

ANALYSIS_SYSTEM_PROMPT = (
    "You are an ATS keyword analysis engine. "
    "Return ONLY a JSON object that follows the requested structure. "
    "Do not include any text outside JSON."
)

ANALYSIS_USER_TEMPLATE = """Analyze the following resume and job description to extract keywords, skills, and other relevant information.

Resume Text:
{resume_text}

Job Description:
{job_description}

Return a JSON object with this structure:
{{
  "matchedKeywords": [
    {{"keyword": "React", "category": "technology", "relevance": 0.9}},
    {{"keyword": "JavaScript", "category": "skill", "relevance": 0.8}}
  ],
  "missingKeywords": [
    {{"keyword": "MongoDB", "category": "technology", "importance": 0.7}}
  ],
  "skills": ["React", "JavaScript"],
  "technologies": ["React", "Node.js"],
  "actionVerbs": ["developed", "implemented"],
  "keywordMatchRatio": 0.65,
  "skillMatchRatio": 0.7,
  "actionVerbCount": 15
}}

Rules:
- relevance, importance, keywordMatchRatio and skillMatchRatio are between 0 and 1.
- category is one of: skill, technology, experience, education, certification, soft_skill.
- actionVerbCount counts action verbs used in the resume.

Focus on technical skills and technologies, soft skills, industry-specific terms,
action verbs and achievements, education and certifications, and experience levels.
"""

OPTIMIZATION_SYSTEM_PROMPT = (
    "You are an expert resume optimization specialist. Provide detailed, actionable "
    "suggestions for improving resumes to match job requirements. Return ONLY JSON."
)

OPTIMIZATION_USER_TEMPLATE = """Analyze this resume and job description to provide optimization suggestions.

RESUME:
{resume_text}

JOB DESCRIPTION:
{job_description}

Return a JSON object with this structure:
{{
  "missingKeywords": ["keyword1", "keyword2"],
  "skillsToEmphasize": ["skill1", "skill2"],
  "experienceGaps": ["gap1", "gap2"],
  "sectionImprovements": {{
    "summary": "suggestion",
    "experience": "suggestion",
    "skills": "suggestion",
    "education": "suggestion"
  }},
  "atsOptimization": "suggestion",
  "overallScore": 85
}}
"""

REWRITE_SYSTEM_PROMPT = (
    "You are a professional resume writer. Optimize resumes to match job requirements "
    "while maintaining authenticity and professionalism."
)

REWRITE_USER_TEMPLATE = """Optimize this resume to better match the job description.

ORIGINAL RESUME:
{resume_text}

JOB DESCRIPTION:
{job_description}

OPTIMIZATION FOCUS: {focus}

Provide an optimized version of the resume that:
1. Includes relevant keywords from the job description
2. Emphasizes matching skills and experience
3. Uses action verbs and quantifiable achievements
4. Maintains professional formatting
5. Is ATS-friendly

Return the optimized resume text directly without additional commentary.
"""


def build_analysis_prompt(resume_text: str, job_description: str) -> str:
    return ANALYSIS_USER_TEMPLATE.format(resume_text=resume_text, job_description=job_description)


def build_optimization_prompt(resume_text: str, job_description: str) -> str:
    return OPTIMIZATION_USER_TEMPLATE.format(resume_text=resume_text, job_description=job_description)


def build_rewrite_prompt(resume_text: str, job_description: str, focus: str | None) -> str:
    return REWRITE_USER_TEMPLATE.format(
        resume_text=resume_text,
        job_description=job_description,
        focus=(focus or "").strip() or "General optimization",
    )
