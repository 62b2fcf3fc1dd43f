"""
Pytest configuration and fixtures for design system MCP tests.
"""
import pytest
import os
import sys
from pathlib import Path
from unittest.mock import Mock

# Add src to path for all tests
src_path = Path(__file__).parent.parent / "src"
sys.path.insert(0, str(src_path))


BUTTON_COMPONENT = """import React from 'react';
import clsx from 'clsx';

export interface ButtonProps {
  /** Text shown inside the button */
  label: string;
  variant?: 'primary' | 'secondary';
  size?: 'small' | 'medium' | 'large';
  disabled?: boolean;
  onClick?: () => void;
  children?: React.ReactNode;
}

/**
 * Primary UI component for user interaction
 */
export const Button = ({ variant = 'primary', size = 'medium', label, ...props }: ButtonProps) => {
  return (
    <button
      type="button"
      aria-label={label}
      onKeyDown={props.onClick}
      className={clsx('btn', `btn--${variant}`, `btn--${size}`)}
      {...props}
    >
      {label}
    </button>
  );
};
"""

BUTTON_STORIES = """import type { Meta, StoryObj } from '@storybook/react';
import { Button } from './Button';

const meta: Meta<typeof Button> = {
  title: 'Components/Actions/Button',
  component: Button,
  tags: ['autodocs', 'interactive'],
  parameters: {
    docs: {
      description: { component: 'Buttons trigger actions and events' },
    },
  },
};

export default meta;
type Story = StoryObj<typeof Button>;

export const Primary: Story = {
  args: { variant: 'primary', label: 'Button' },
};

export const Disabled: Story = {
  args: { disabled: true, label: 'Disabled' },
};
"""

CARD_COMPONENT = """import React from 'react';

/**
 * @dsm
 * @name: Card
 * @description: Surface that groups related content and actions
 * @category: layout
 * @tags: surface, container
 * @props:
 * - title (string): Card heading
 * - elevation (number?): Shadow depth
 * @examples:
 * - Basic: <Card title="Hello" />
 */
export const Card = ({ title, children }: CardProps) => (
  <div className="card">
    <h3>{title}</h3>
    {children}
  </div>
);
"""

CARD_STORIES = """import { Card } from './Card';

export default {
  title: 'Layout/Card',
  component: Card,
};

export const Basic = {
  args: { title: 'Card title' },
};
"""


@pytest.fixture(autouse=True)
def setup_test_environment(monkeypatch):
    """Setup test environment variables."""
    for key in list(os.environ):
        if key.startswith("DSM_"):
            monkeypatch.delenv(key, raising=False)

    monkeypatch.setenv("CHAT_MODEL", "gpt-4o-mini")
    monkeypatch.setenv("CHAT_API_KEY", "test-chat-api-key")
    monkeypatch.setenv("CHAT_API_BASE", "https://api.openai.com/v1")
    monkeypatch.delenv("TRANSPORT", raising=False)
    yield


@pytest.fixture
def design_system_root(tmp_path):
    """Create a small design system with two components and their stories."""
    components = tmp_path / "src" / "components"
    (components / "Button").mkdir(parents=True)
    (components / "Card").mkdir(parents=True)

    (components / "Button" / "Button.tsx").write_text(BUTTON_COMPONENT)
    (components / "Button" / "Button.stories.tsx").write_text(BUTTON_STORIES)
    (components / "Card" / "Card.tsx").write_text(CARD_COMPONENT)
    (components / "Card" / "Card.stories.jsx").write_text(CARD_STORIES)

    # Never scanned
    ignored = tmp_path / "node_modules" / "lib"
    ignored.mkdir(parents=True)
    (ignored / "Other.stories.tsx").write_text(BUTTON_STORIES)

    return tmp_path


@pytest.fixture
def button_story(design_system_root):
    return str(design_system_root / "src" / "components" / "Button" / "Button.stories.tsx")


@pytest.fixture
def button_component(design_system_root):
    return str(design_system_root / "src" / "components" / "Button" / "Button.tsx")


@pytest.fixture
def card_component(design_system_root):
    return str(design_system_root / "src" / "components" / "Card" / "Card.tsx")


@pytest.fixture
def mock_chat_client():
    """Provide a mock OpenAI client whose completion returns plain text."""
    client = Mock()
    message = Mock()
    message.content = "Description: A fully accessible button for primary actions"
    message.tool_calls = None
    response = Mock()
    response.choices = [Mock(message=message)]
    client.chat.completions.create.return_value = response
    return client
