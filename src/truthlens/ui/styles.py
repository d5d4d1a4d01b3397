"""CSS styles for the TUI.

Hides layout and styling decisions from the application logic.
Uses Textual CSS features: nesting, pseudo-classes, variables.
"""

APP_CSS = """
/* ============================================
   Main Screen Layout - single column
   ============================================ */
Screen {
    layout: vertical;
    background: $background;
}

/* ============================================
   Chat History Panel
   ============================================ */
#chat-history {
    height: 1fr;
    background: $panel;
    border: round $primary 60%;
    border-title-color: $primary;
    border-title-style: bold;
    border-title-align: left;
    border-subtitle-color: $text-muted;
    border-subtitle-align: right;
    padding: 0 1;
    scrollbar-gutter: stable;

    &:focus-within {
        border: round $primary;
    }
}

/* ============================================
   Log Panel
   ============================================ */
#debug-panel {
    height: auto;
    min-height: 6;
    max-height: 12;
    background: $panel;
    border: round $warning 60%;
    border-title-color: $warning;
    border-title-style: bold;
    border-subtitle-color: $text-muted;
    border-subtitle-align: right;
    padding: 0 1;
    overflow-y: scroll;
    overflow-x: auto;
}

/* ============================================
   Bottom Bar - Status, Suggestions, Input
   ============================================ */
#bottom-bar {
    height: auto;
    padding: 0 1;
    background: $panel;
    border-top: solid $border;
}

#status {
    height: 1;
    padding: 0 2;
    background: $surface;
    color: $foreground;
}

SuggestionBar {
    height: auto;
    margin: 1 0 0 0;

    & Button {
        width: 1fr;
        margin: 0 1 0 0;
    }
}

ChatInputBar {
    height: 5;
    margin-top: 1;
    border: round $primary 60%;
    background: $panel;

    &:focus-within {
        border: round $primary;
    }
}

#chat-input {
    width: 1fr;
    height: 100%;
    border: none;
    padding: 0 1;
    background: transparent;
}

#send-btn {
    width: 10;
    height: 100%;
    margin: 0 0 0 1;
    border: tall $success;
    background: $success;
    color: $background;
    text-style: bold;

    &:disabled {
        background: $surface;
        border: tall $border;
        color: $text-muted;
    }
}

#disclaimer {
    height: 1;
    width: 100%;
    text-align: center;
    color: $text-muted;
}

/* ============================================
   Chat Messages
   ============================================ */
.chat-message {
    width: 100%;
    height: auto;
    margin: 0 0 1 0;
    padding: 1 2;
    background: transparent;
}

.user-message {
    border-right: tall $primary;
    background: $primary 10%;

    & .message-header {
        color: $primary;
        text-style: bold;
        text-align: right;
    }
}

.assistant-message {
    border-left: tall $secondary;
    background: $secondary 8%;

    & .message-header {
        color: $secondary;
        text-style: bold;
    }
}

.error-message {
    border-left: tall $error;
    background: $error 12%;

    & .message-header {
        color: $error;
        text-style: bold;
    }

    & .message-content {
        color: $error;
    }
}

.message-header {
    height: auto;
}

.message-content {
    height: auto;
    color: $foreground;
}

.message-sources {
    height: auto;
    margin-top: 1;
    padding-top: 1;
    border-top: solid $border;
    color: $text-muted;
}

#analyzing {
    height: auto;
    padding: 0 2;
    color: $text-muted;
    text-style: italic;
}

/* ============================================
   Notification Toasts
   ============================================ */
Toast {
    background: $surface;
    border: tall $border;
    padding: 0 1;

    &.-error {
        border: tall $error;
    }

    &.-warning {
        border: tall $warning;
    }
}
"""
