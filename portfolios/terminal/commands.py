"""Command table for the desktop terminal.

Commands with canned output map straight to their lines. Commands that do
something (open a URL, close the window, reboot...) are dispatched by
:class:`portfolios.terminal.terminal.TerminalSession`; their names are listed
in ``EFFECT_COMMANDS``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Optional, Tuple

PROMPT = "pradyum@altf4-os:~$ "

LINKEDIN_URL = "https://linkedin.com/in/pradyum-mistry"
GITHUB_URL = "https://github.com/altf4-games"
RESUME_URL_ENDPOINT = "https://code-snip.vercel.app/raw/100"

UNKNOWN_COMMAND = "Unknown command. Type 'help' for a list of available commands."

WELCOME_BANNER: Tuple[str, ...] = (
    "===========================================",
    "       Welcome to PortfoliOS Terminal      ",
    "===========================================",
    "Type 'help' for available commands.",
    "",
)

SEPARATOR = "-------------------"


@dataclass(frozen=True)
class HelpEntry:
    name: str
    summary: str

    def render(self) -> str:
        return f"{self.name:<11} - {self.summary}"


USER_COMMANDS: Tuple[HelpEntry, ...] = (
    HelpEntry("help", "Display this help message"),
    HelpEntry("clear", "Clear the terminal screen"),
    HelpEntry("about", "Learn about me"),
    HelpEntry("education", "View my educational background"),
    HelpEntry("experience", "View my work experience"),
    HelpEntry("skills", "View my technical skills"),
    HelpEntry("achievements", "View my achievements"),
    HelpEntry("linkedin", "Open my LinkedIn profile"),
    HelpEntry("github", "Open my GitHub profile"),
    HelpEntry("resume", "Open my resume"),
    HelpEntry("whoami", "Display user identity"),
    HelpEntry("techstack", "View complete tech stack"),
    HelpEntry("fortune", "Get a random developer quote"),
    HelpEntry("sudo", "Attempt elevated permissions"),
    HelpEntry("reboot", "Restart the terminal"),
    HelpEntry("exit", "Close the terminal"),
    HelpEntry("escape", "Toggle between OS and Explore mode (or press Escape key)"),
)

SYSTEM_COMMANDS: Tuple[HelpEntry, ...] = (
    HelpEntry("uname", "Display OS information"),
    HelpEntry("date", "Display current date and time"),
    HelpEntry("uptime", "Show how long the system has been running"),
    HelpEntry("hostname", "Display the system hostname"),
    HelpEntry("pwd", "Print working directory"),
    HelpEntry("ls", "List directory contents"),
    HelpEntry("cat", "Display file contents"),
    HelpEntry("echo", "Display a line of text"),
)


def help_lines() -> Tuple[str, ...]:
    lines = ["Available commands:", SEPARATOR]
    lines.extend(entry.render() for entry in USER_COMMANDS)
    lines.extend(["", "System Commands:", SEPARATOR])
    lines.extend(entry.render() for entry in SYSTEM_COMMANDS)
    return tuple(lines)


FORTUNE_QUOTES: Tuple[str, ...] = (
    "Code is like humor. When you have to explain it, it's bad.",
    "First, solve the problem. Then, write the code.",
    "Any fool can write code that a computer can understand. Good programmers write code that humans can understand.",
    "The best error message is the one that never shows up.",
    "Simplicity is the soul of efficiency.",
    "Make it work, make it right, make it fast.",
    "Programming isn't about what you know; it's about what you can figure out.",
)

# Static command -> output lines
CANNED_OUTPUT: Dict[str, Tuple[str, ...]] = {
    "about": (
        "Hi, I am Pradyum Mistry, a developer passionate about games, XR, and full-stack engineering.",
    ),
    "education": (
        "B.Tech in Computer Engineering",
        "K.J. Somaiya College of Engineering, Mumbai",
        "Expected Graduation: 2027",
        "CGPA: 9.5",
    ),
    "experience": (
        "Work Experience:",
        SEPARATOR,
        "Game Development & XR Intern",
        "VyuXR Immersive Studios",
        "May 2025 - June 2025",
        "",
        "Tech Head",
        "Team Vision AR/VR Club",
        "July 2024 - May 2025",
    ),
    "skills": (
        "Core Technical Skills:",
        SEPARATOR,
        "→ Full-Stack Development (Web & Mobile)",
        "→ AI/ML",
        "→ Competitive Programming (4 Star CodeChef, 300+ LeetCode)",
        "→ Backend Architecture & APIs",
        "→ Real-time Communication (WebRTC, Socket.io)",
        "→ Database Design & Optimization",
        "→ Game Development (Unity, Unreal Engine)",
        "→ XR Development (WebXR, AR/VR)",
    ),
    "achievements": (
        "Achievements:",
        SEPARATOR,
        "- Won Most Addictive Game at 8th Wall Forge the Future Game Jam",
        "- Top 10 in I Love Hackathon Pune Web3 Edition",
        "- Top 6 in KJSSE Hack 8",
        "- 4 Star CodeChef Rating",
        "- 300+ LeetCode problems solved",
        "- Games featured by Markiplier and Jacksepticeye (20M+ subscribers)",
        "- 200K+ game downloads across platforms",
    ),
    "whoami": (
        "Pradyum Mistry - Full Stack Developer, Game Developer, App Developer, "
        "Competitive Programmer, and AI/ML Enthusiast.",
    ),
    "techstack": (
        "Complete Tech Stack:",
        SEPARATOR,
        "Languages: C, C++, C#, JavaScript, Python, Java, Dart",
        "Frontend: HTML, CSS, React, Next.js, Three.js",
        "Backend: Node.js, Express, FastAPI",
        "Databases: MongoDB, PostgreSQL, Firebase",
        "Game Engines: Unity, Unreal Engine",
        "Mobile: Flutter, React Native",
        "AI/ML: Scikit-learn, TensorFlow",
        "Other: Socket.io, WebRTC, WebXR",
    ),
    "sudo": (
        "Access denied. Permission required.",
        "Nice try though!",
    ),
    "uname": (
        "PortfoliOS v1.0.0",
        "Kernel: Unity 2022.3 LTS",
        "Architecture: x86_64",
        "Build Date: October 2025",
    ),
    "hostname": ("portfolios.local",),
    "pwd": ("/home/pradyum",),
    "ls": (
        "Desktop/     Documents/   Downloads/",
        "Pictures/    Projects/    Music/",
        "Videos/      portfolio/   resume.pdf",
    ),
    "cat": (
        "cat: missing file operand",
        "Try 'cat resume.txt' to view resume (or use 'resume' command)",
    ),
    "echo": ("Hello from PortfoliOS!",),
}

ALIASES: Dict[str, str] = {
    "version": "uname",
}

EFFECT_COMMANDS: Tuple[str, ...] = (
    "help",
    "clear",
    "linkedin",
    "github",
    "resume",
    "fortune",
    "reboot",
    "exit",
    "escape",
    "date",
    "uptime",
)

REBOOT_SEQUENCE: Tuple[str, ...] = (
    "Initiating system reboot...",
    "Shutting down services...",
    "Clearing memory...",
    "Restarting PortfoliOS...",
)

DATE_FORMAT = "%A, %B %d, %Y %H:%M:%S"


def resolve(command: str) -> str:
    return ALIASES.get(command, command)


def canned_output(command: str) -> Optional[Tuple[str, ...]]:
    return CANNED_OUTPUT.get(resolve(command))


def is_known(command: str) -> bool:
    name = resolve(command)
    return name in CANNED_OUTPUT or name in EFFECT_COMMANDS


def format_uptime(seconds: float) -> str:
    total = max(0.0, seconds)
    hours = int(total // 3600)
    minutes = int((total % 3600) // 60)
    secs = int(total % 60)
    return f"System uptime: {hours}h {minutes}m {secs}s"
