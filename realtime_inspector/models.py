"""Pydantic models matching the inspector frontend's TypeScript types."""
from __future__ import annotations
from pydantic import BaseModel, Field
from typing import Any, Literal, Optional

EventSource = Literal["USER", "OPENAI"]
EventCategory = Literal[
    "session",
    "user_input",
    "response",
    "function_call",
    "audio",
    "transcript",
    "error",
    "system",
    "unknown",
]
TimelineItemType = Literal["session_event", "user_input", "response_group", "error", "system_event"]


# ── Log records ─────────────────────────────────────────────────────

class RawLogLine(BaseModel):
    id: str
    timestamp: str
    sessionId: str
    source: EventSource
    eventType: str = "unknown"
    payload: Any = None
    rawLine: str = ""


class ParsedEvent(RawLogLine):
    category: EventCategory = "unknown"
    eventId: Optional[str] = None
    responseId: Optional[str] = None
    itemId: Optional[str] = None
    callId: Optional[str] = None
    outputIndex: Optional[int] = None
    delta: Optional[str] = None
    obfuscation: Optional[str] = None


class ParseWarning(BaseModel):
    lineNumber: int
    reason: Literal["grammar", "json"]
    message: str
    excerpt: str = ""


# ── Response reconstruction ─────────────────────────────────────────

class InputTokenDetails(BaseModel):
    textTokens: int = 0
    audioTokens: int = 0
    cachedTokens: int = 0


class OutputTokenDetails(BaseModel):
    textTokens: int = 0
    audioTokens: int = 0


class TokenUsage(BaseModel):
    totalTokens: int = 0
    inputTokens: int = 0
    outputTokens: int = 0
    inputTokenDetails: Optional[InputTokenDetails] = None
    outputTokenDetails: Optional[OutputTokenDetails] = None


class ResponseGroup(BaseModel):
    responseId: str
    events: list[ParsedEvent] = Field(default_factory=list)
    startTime: str = ""
    endTime: Optional[str] = None
    durationMs: Optional[int] = None
    status: Literal["in_progress", "completed"] = "in_progress"
    responseStatus: Optional[str] = None  # service-reported, e.g. "completed" | "cancelled" | "failed"
    type: Literal["function_call", "audio_response", "text_response", "mixed"] = "mixed"
    functionName: Optional[str] = None
    callId: Optional[str] = None
    functionArguments: Any = None  # parsed JSON, or the raw string when it does not parse
    functionArgumentsRaw: Optional[str] = None
    transcript: Optional[str] = None
    textContent: Optional[str] = None
    audioData: Optional[str] = None  # base64
    audioChunkCount: Optional[int] = None
    tokenUsage: Optional[TokenUsage] = None


# ── Session configuration ───────────────────────────────────────────

class SessionTool(BaseModel):
    type: Optional[str] = None
    name: str = ""
    description: Optional[str] = None


class SessionConfig(BaseModel):
    id: Optional[str] = None
    model: Optional[str] = None
    voice: Optional[str] = None
    instructions: Optional[str] = None
    tools: list[SessionTool] = Field(default_factory=list)
    modalities: list[str] = Field(default_factory=list)
    turnDetection: Optional[dict[str, Any]] = None
    inputAudioFormat: Optional[str] = None
    outputAudioFormat: Optional[str] = None
    inputAudioTranscription: Optional[dict[str, Any]] = None
    temperature: Optional[float] = None
    maxResponseOutputTokens: Optional[int | str] = None  # int or "inf"
    createdAt: Optional[str] = None
    updatedAt: Optional[str] = None
    raw: dict[str, Any] = Field(default_factory=dict)


# ── Timeline ────────────────────────────────────────────────────────

class SessionSnapshot(BaseModel):
    eventType: Literal["created", "updated"]
    model: Optional[str] = None
    voice: Optional[str] = None
    instructions: Optional[str] = None
    tools: list[SessionTool] = Field(default_factory=list)
    modalities: list[str] = Field(default_factory=list)


class UserInput(BaseModel):
    inputType: Literal["text", "audio", "transcription"]
    text: Optional[str] = None
    hasAudio: bool = False
    audioData: Optional[str] = None
    audioChunkCount: Optional[int] = None
    itemId: Optional[str] = None


class ErrorDetail(BaseModel):
    message: str
    code: Optional[str] = None
    type: Optional[str] = None
    param: Optional[str] = None
    eventId: Optional[str] = None


class SystemDescription(BaseModel):
    eventType: str
    description: str


class TimelineItem(BaseModel):
    id: str
    type: TimelineItemType
    timestamp: str
    sourceEvents: list[ParsedEvent] = Field(default_factory=list)
    sessionSnapshot: Optional[SessionSnapshot] = None
    userInput: Optional[UserInput] = None
    responseGroup: Optional[ResponseGroup] = None
    errorDetail: Optional[ErrorDetail] = None
    systemDescription: Optional[SystemDescription] = None


# ── Engine output ───────────────────────────────────────────────────

class ProcessedLog(BaseModel):
    sessions: list[str] = Field(default_factory=list)
    currentSession: Optional[str] = None
    sessionConfig: Optional[SessionConfig] = None
    conversationItems: list[TimelineItem] = Field(default_factory=list)
    rawEvents: list[ParsedEvent] = Field(default_factory=list)
    totalEvents: int = 0
    warnings: list[ParseWarning] = Field(default_factory=list)
