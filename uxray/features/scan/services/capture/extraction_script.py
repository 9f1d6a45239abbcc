"""
In-page structural extraction.

Runs inside the page via driver.execute_script. Every collection, flag and
landmark is guarded on its own so one failing selector degrades that field
to an empty/false/null value instead of aborting the whole extraction.
Rectangles are in document coordinates so they line up with a full-page
screenshot.
"""

COLLECTION_SELECTORS = {
    "headings": "h1, h2, h3",
    "buttons": 'button, [role="button"], input[type="submit"], .btn',
    "links": "a[href]",
    "forms": "form",
    "images": "img",
}

# Tried in order, first match wins
LANDMARK_SELECTORS = {
    "navigation": ["nav", '[role="navigation"]', ".navbar", ".nav"],
    "header": ["header", '[role="banner"]', ".header"],
    "footer": ["footer", '[role="contentinfo"]', ".footer"],
    "main_content": ["main", '[role="main"]', ".main-content"],
    "primary_cta": ['button[type="submit"]', ".btn-primary", ".cta-button"],
    "forms": ["form"],
}

STRUCTURE_FLAG_SELECTORS = {
    "has_navigation": LANDMARK_SELECTORS["navigation"],
    "has_header": LANDMARK_SELECTORS["header"],
    "has_footer": LANDMARK_SELECTORS["footer"],
    "has_sidebar": ["aside", '[role="complementary"]', ".sidebar"],
}

EXTRACTION_SCRIPT = """
const cfg = arguments[0];

const guard = (fn, fallback) => {
  try {
    return fn();
  } catch (e) {
    return fallback;
  }
};

const rectOf = (el) => {
  const rect = el.getBoundingClientRect();
  return {
    x: Math.round(rect.x + window.scrollX),
    y: Math.round(rect.y + window.scrollY),
    width: Math.round(rect.width),
    height: Math.round(rect.height)
  };
};

const elementInfo = (selector) => guard(() => {
  return Array.from(document.querySelectorAll(selector)).slice(0, cfg.maxElements).map(el => {
    const className = typeof el.className === 'string' ? el.className : (el.getAttribute('class') || '');
    return {
      tag_name: el.tagName,
      text: (el.textContent || '').substring(0, cfg.textLimit).trim(),
      attributes: {
        id: el.id || '',
        class: className.substring(0, cfg.textLimit),
        href: typeof el.href === 'string' ? el.href : ''
      },
      bounds: guard(() => rectOf(el), null)
    };
  });
}, []);

const firstMatch = (selectors) => {
  for (const selector of selectors) {
    const el = guard(() => document.querySelector(selector), null);
    if (el) {
      return el;
    }
  }
  return null;
};

const result = {
  title: guard(() => document.title || 'No title', 'No title'),
  url: guard(() => window.location.href, ''),
  viewport: guard(() => ({ width: window.innerWidth, height: window.innerHeight }), null),
  body_text: guard(() => ((document.body && document.body.innerText) || '').substring(0, cfg.bodyLimit), ''),
  element_bounds: {}
};

for (const [name, selector] of Object.entries(cfg.collections)) {
  result[name] = elementInfo(selector);
}

for (const [flag, selectors] of Object.entries(cfg.flags)) {
  result[flag] = guard(() => !!firstMatch(selectors), false);
}

for (const [landmark, selectors] of Object.entries(cfg.landmarks)) {
  result.element_bounds[landmark] = guard(() => {
    const el = firstMatch(selectors);
    return el ? rectOf(el) : null;
  }, null);
}

return result;
"""
