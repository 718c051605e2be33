# adapters/web/openapi_spec.py
# OpenAPI 3.0 descriptor for the REST API.

_JOB_ID_PARAM = {
    "name": "job_id",
    "in": "path",
    "required": True,
    "schema": {"type": "string", "format": "uuid"}
}

_ERROR = {
    "application/json": {
        "schema": {
            "type": "object",
            "properties": {"error": {"type": "string"}}
        }
    }
}

OPENAPI_SPEC = {
    "openapi": "3.0.0",
    "info": {
        "title": "MP3 Snipper API",
        "description": "Cut the start and/or end off MPEG audio by dropping whole frames, without re-encoding.",
        "version": "1.0.0"
    },
    "servers": [
        {
            "url": "/api/v1",
            "description": "API V1"
        }
    ],
    "components": {
        "securitySchemes": {
            "bearerAuth": {
                "type": "http",
                "scheme": "bearer"
            }
        },
        "schemas": {
            "TrimReport": {
                "type": "object",
                "properties": {
                    "input_bytes": {"type": "integer"},
                    "effective_bytes": {"type": "integer"},
                    "predicted_frames": {"type": "integer"},
                    "frames_encountered": {"type": "integer"},
                    "frames_dropped": {"type": "integer"},
                    "frames_included": {"type": "integer"},
                    "cumulative_duration": {"type": "integer", "description": "Nanoseconds of audio in the input."},
                    "output_duration": {"type": "integer", "description": "Nanoseconds of audio kept."},
                    "output_bytes": {"type": "integer"},
                    "tags_passed": {"type": "integer"},
                    "summary_header_skipped": {"type": "boolean"}
                }
            }
        }
    },
    "security": [
        {
            "bearerAuth": []
        }
    ],
    "paths": {
        "/trim": {
            "post": {
                "summary": "Start a trim job",
                "requestBody": {
                    "required": True,
                    "content": {
                        "multipart/form-data": {
                            "schema": {
                                "type": "object",
                                "properties": {
                                    "file": {
                                        "type": "string",
                                        "format": "binary",
                                        "description": "The MPEG audio file to trim (max 100MB)."
                                    },
                                    "start": {
                                        "type": "string",
                                        "example": "25s",
                                        "description": "Audio before this point is dropped. Units: ns, us, ms, s, m, h."
                                    },
                                    "end": {
                                        "type": "string",
                                        "example": "10s",
                                        "default": "0s",
                                        "description": "Amount of audio dropped from the end."
                                    },
                                    "prediction": {
                                        "type": "string",
                                        "enum": ["first-frame", "running-average"],
                                        "default": "first-frame"
                                    }
                                },
                                "required": ["file", "start"]
                            }
                        }
                    }
                },
                "responses": {
                    "202": {
                        "description": "Job created",
                        "content": {
                            "application/json": {
                                "schema": {
                                    "type": "object",
                                    "properties": {
                                        "jobId": {"type": "string", "example": "123e4567-e89b-42d3-a456-426614174000"}
                                    }
                                }
                            }
                        }
                    },
                    "400": {"description": "Missing file or invalid duration", "content": _ERROR},
                    "413": {"description": "Upload larger than 100MB", "content": _ERROR},
                    "415": {"description": "Not MPEG audio", "content": _ERROR}
                }
            }
        },
        "/status/{job_id}": {
            "get": {
                "summary": "Check job status",
                "parameters": [_JOB_ID_PARAM],
                "responses": {
                    "200": {
                        "description": "Job status",
                        "content": {
                            "application/json": {
                                "schema": {
                                    "type": "object",
                                    "properties": {
                                        "status": {"type": "string", "enum": ["queued", "processing", "done", "error"]},
                                        "progress": {"type": "integer", "minimum": 0, "maximum": 100},
                                        "step": {"type": "string"},
                                        "error": {"type": "string", "nullable": True},
                                        "report": {
                                            "allOf": [{"$ref": "#/components/schemas/TrimReport"}],
                                            "nullable": True
                                        }
                                    }
                                }
                            }
                        }
                    },
                    "404": {"description": "Job not found", "content": _ERROR}
                }
            }
        },
        "/download/{job_id}": {
            "get": {
                "summary": "Download trimmed audio",
                "parameters": [_JOB_ID_PARAM],
                "responses": {
                    "200": {
                        "description": "Audio file",
                        "content": {
                            "audio/mpeg": {}
                        }
                    },
                    "404": {"description": "Job not found or not finished", "content": _ERROR},
                    "410": {"description": "Output expired", "content": _ERROR}
                }
            }
        }
    }
}
